"""Best-effort reservation emails.

``Notifier.dispatch`` schedules the sends as a background task and returns at
once. Failures are logged and dropped; they never reach the request that
created the reservation.
"""

import asyncio
from email.message import EmailMessage

import structlog

from backend.app.core.config import Settings, settings
from backend.app.core.errors import NotificationError
from backend.app.core.mailer import MailTransport, build_transport
from backend.app.models.reservation import Reservation

logger = structlog.get_logger(__name__)


class Notifier:
    def __init__(self, app_settings: Settings, transport: MailTransport | None = None) -> None:
        self.settings = app_settings
        self.transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return self.transport is not None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, record: Reservation) -> asyncio.Task:
        """Start ``notify(record)`` in the background without waiting for it."""
        task = asyncio.create_task(self.notify(record), name=f"notify-{record.code}")
        self._pending.add(task)
        task.add_done_callback(self._forget)
        return task

    async def notify(self, record: Reservation) -> None:
        if self.transport is None:
            logger.info("SMTP not configured, skipping reservation emails", code=record.code)
            return

        sends = []
        recipient = self.settings.internal_recipient
        if recipient:
            sends.append(self._deliver("internal", self.build_internal_message(record, recipient)))
        else:
            logger.warning("No business address configured for internal email", code=record.code)
        if record.email:
            sends.append(self._deliver("client", self.build_client_message(record)))

        for outcome in await asyncio.gather(*sends, return_exceptions=True):
            if isinstance(outcome, Exception):
                logger.error("Reservation email crashed", code=record.code, exc_info=outcome)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight sends; cancel whatever is still running after ``timeout``."""
        if not self._pending:
            return
        _, still_running = await asyncio.wait(set(self._pending), timeout=timeout)
        if still_running:
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning("Cancelled unfinished reservation emails", count=len(still_running))

    def render_when(self, record: Reservation) -> str:
        local = record.starts_at.astimezone(self.settings.tz)
        return local.strftime(self.settings.DATETIME_FORMAT)

    def build_internal_message(self, record: Reservation, recipient: str) -> EmailMessage:
        site = self.settings.SITE_NAME
        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = recipient
        message["Subject"] = f"Nueva reserva (#{record.code}) - {site}"
        message.set_content(
            "Nueva reserva recibida:\n\n"
            f"Código: {record.code}\n"
            f"Nombre: {record.name}\n"
            f"Teléfono: {record.phone}\n"
            f"Email: {record.email or '-'}\n"
            f"Personas: {record.people}\n"
            f"Fecha/Hora: {self.render_when(record)}\n"
            f"Comentarios: {record.notes or '-'}\n"
            f"Estado: {record.status}\n"
            f"ID: {record.id}\n\n"
            f"Archivo: {self.settings.reservations_path}"
        )
        return message

    def build_client_message(self, record: Reservation) -> EmailMessage:
        site = self.settings.SITE_NAME
        lines = [
            f"Hola {record.name},",
            "",
            f"Hemos recibido tu solicitud de reserva en {site}.",
            "Detalles:",
            f"- Código: {record.code}",
            f"- Personas: {record.people}",
            f"- Fecha/Hora: {self.render_when(record)}",
            f"- Comentarios: {record.notes or '-'}",
            "",
            "Pronto nos pondremos en contacto para confirmar.",
        ]
        if self.settings.BUSINESS_ADDRESS or self.settings.BUSINESS_MAPS_URL:
            lines += ["", "Ubicación:"]
            if self.settings.BUSINESS_ADDRESS:
                lines.append(self.settings.BUSINESS_ADDRESS)
            if self.settings.BUSINESS_MAPS_URL:
                lines.append(f"Google Maps: {self.settings.BUSINESS_MAPS_URL}")
        lines += ["", "¡Gracias por preferirnos!"]

        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = record.email
        message["Subject"] = f"Reserva recibida (#{record.code}) - {site}"
        message.set_content("\n".join(lines))
        return message

    async def _deliver(self, kind: str, message: EmailMessage) -> None:
        try:
            await self.transport.send(message)
        except NotificationError as exc:
            logger.error("Reservation email failed", kind=kind, to=message["To"], error=str(exc))
        else:
            logger.info("Reservation email sent", kind=kind, to=message["To"])

    def _forget(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Reservation email task crashed", task=task.get_name(), exc_info=exc)


notifier: Notifier | None = None


def init_notifier(app_settings: Settings) -> Notifier:
    global notifier
    notifier = Notifier(app_settings, build_transport(app_settings))
    if not notifier.active:
        logger.info("SMTP not configured, reservation emails disabled")
    return notifier


def get_notifier() -> Notifier:
    global notifier
    if notifier is None:
        notifier = Notifier(settings)
    return notifier


async def close_notifier(timeout: float | None = None) -> None:
    if notifier is not None:
        await notifier.drain(timeout)
