"""Email sending service with SMTP."""

import asyncio
import html as html_escape
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any

import aiosmtplib
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPConnectTimeoutError,
    SMTPException,
    SMTPReadTimeoutError,
)

from surtidores.config import NotificationKind, settings
from surtidores.core.logging import get_logger
from surtidores.models.user import Users

logger = get_logger(__name__)


async def send_email(
    to: str | list[str],
    subject: str,
    body: str,
    html: str | None = None,
) -> bool:
    """
    Send email via SMTP with retry logic.

    Args:
        to: Recipient email address(es)
        subject: Email subject
        body: Plain text email body
        html: Optional HTML email body

    Returns:
        True if email sent successfully, False otherwise

    Note:
        This function logs errors but does NOT raise exceptions.
        Callers should check return value if they need to know success/failure.
    """
    if not settings.SMTP_HOST:
        logger.warning("email_not_configured", to=to, subject=subject)
        return False

    message = EmailMessage()
    message["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    message["To"] = to if isinstance(to, str) else ", ".join(to)
    message["Subject"] = subject
    message.set_content(body)

    if html:
        message.add_alternative(html, subtype="html")

    # Only retry connection failures where we know the email wasn't queued
    max_retries = 3
    for attempt in range(max_retries):
        try:
            await aiosmtplib.send(
                message,
                hostname=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                username=settings.SMTP_USER or None,
                password=settings.SMTP_PASSWORD or None,
                use_tls=settings.SMTP_TLS,
                start_tls=settings.SMTP_STARTTLS,
                timeout=30,
            )
            logger.info("email_sent_success", to=to, subject=subject, attempt=attempt + 1)
            return True

        except SMTPReadTimeoutError as e:
            # Never retry: the server may already have queued the message
            logger.error(
                "email_send_timeout_after_data",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except SMTPAuthenticationError as e:
            logger.error(
                "email_auth_failed",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except (SMTPConnectError, SMTPConnectTimeoutError) as e:
            # Connection never established, no data sent
            logger.warning(
                "email_connection_failed",
                to=to,
                subject=subject,
                attempt=attempt + 1,
                error=str(e),
                error_type=type(e).__name__,
            )
            if attempt < max_retries - 1:
                # Exponential backoff: 1s, 2s, 4s
                await asyncio.sleep(2**attempt)
            else:
                logger.error(
                    "email_connection_failed_all_retries",
                    to=to,
                    subject=subject,
                    error=str(e),
                )
                return False

        except SMTPException as e:
            logger.error(
                "email_smtp_error",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except Exception as e:
            logger.error(
                "email_send_unexpected_error",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    return False


@dataclass
class RenderedEmail:
    subject: str
    body: str
    html: str


def _html_document(heading: str, paragraphs: list[str], link_url: str, link_text: str) -> str:
    """Wrap already-escaped paragraphs in the shared email layout."""
    content = "\n".join(f"        <p>{p}</p>" for p in paragraphs)
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .button {{
            display: inline-block;
            padding: 12px 24px;
            background-color: #1565C0;
            color: white;
            text-decoration: none;
            border-radius: 4px;
        }}
    </style>
</head>
<body>
    <div class="container">
        <h2>{heading}</h2>
{content}
        <p><a href="{link_url}" class="button">{link_text}</a></p>
    </div>
</body>
</html>
"""


def render_notification(
    kind: NotificationKind, user: Users, context: dict[str, Any]
) -> RenderedEmail:
    """
    Build subject, plain-text body and HTML body for a notification.

    All user-supplied values (names, station data, reasons, notes) are
    HTML-escaped in the HTML body.

    Raises:
        ValueError: If the notification kind has no template
    """
    name = user.name or "Usuario"
    station_name = context.get("station_name") or "tu estación"
    address = context.get("address") or ""
    station_url = f"{settings.FRONTEND_URL}/estacion/{context.get('station_id', '')}"
    my_stations_url = f"{settings.FRONTEND_URL}/mis-estaciones"

    safe_name = html_escape.escape(name)
    safe_station = html_escape.escape(station_name)
    safe_address = html_escape.escape(address)

    if kind == NotificationKind.station_created:
        subject = "Recibimos tu estación"
        body = (
            f"Hola {name},\n\n"
            f"Gracias por agregar {station_name} ({address}).\n"
            "Nuestro equipo la revisará y te avisaremos cuando esté aprobada.\n\n"
            f"{my_stations_url}\n"
        )
        html = _html_document(
            "¡Gracias por sumar una estación!",
            [
                f"Hola {safe_name},",
                f"Recibimos <strong>{safe_station}</strong> ({safe_address}).",
                "Nuestro equipo la revisará y te avisaremos cuando esté aprobada.",
            ],
            my_stations_url,
            "Ver mis estaciones",
        )

    elif kind == NotificationKind.station_approved:
        subject = "Tu estación fue aprobada"
        body = (
            f"Hola {name},\n\n"
            f"{station_name} ({address}) ya está publicada.\n"
            "Desde ahora podés cargar sus precios directamente.\n\n"
            f"{station_url}\n"
        )
        html = _html_document(
            "Estación aprobada",
            [
                f"Hola {safe_name},",
                f"<strong>{safe_station}</strong> ({safe_address}) ya está publicada.",
                "Desde ahora podés cargar sus precios directamente.",
            ],
            station_url,
            "Ver estación",
        )

    elif kind == NotificationKind.station_rejected:
        reason = context.get("reason") or "Sin motivo especificado"
        subject = "Tu estación no fue aprobada"
        body = (
            f"Hola {name},\n\n"
            f"Revisamos {station_name} ({address}) y no pudimos aprobarla.\n"
            f"Motivo: {reason}\n\n"
            "Podés corregir los datos y volver a enviarla desde:\n"
            f"{my_stations_url}\n"
        )
        html = _html_document(
            "Estación no aprobada",
            [
                f"Hola {safe_name},",
                f"Revisamos <strong>{safe_station}</strong> ({safe_address}) y no pudimos aprobarla.",
                f"Motivo: {html_escape.escape(reason)}",
                "Podés corregir los datos y volver a enviarla.",
            ],
            my_stations_url,
            "Ver mis estaciones",
        )

    elif kind == NotificationKind.station_resubmitted:
        previous_reason = context.get("previous_reason") or "Sin motivo especificado"
        subject = "Reenviaste tu estación"
        body = (
            f"Hola {name},\n\n"
            f"{station_name} volvió a la cola de revisión.\n"
            f"Motivo del rechazo anterior: {previous_reason}\n\n"
            f"{my_stations_url}\n"
        )
        html = _html_document(
            "Estación reenviada",
            [
                f"Hola {safe_name},",
                f"<strong>{safe_station}</strong> volvió a la cola de revisión.",
                f"Motivo del rechazo anterior: {html_escape.escape(previous_reason)}",
            ],
            my_stations_url,
            "Ver mis estaciones",
        )

    elif kind == NotificationKind.price_report_thanks:
        fuel_type = context.get("fuel_type", "")
        price = context.get("price", "")
        subject = "Gracias por reportar un precio"
        body = (
            f"Hola {name},\n\n"
            f"Registramos tu reporte de {fuel_type} a ${price} en {station_name}.\n"
            "Cuando otros usuarios lo confirmen quedará validado.\n\n"
            f"{station_url}\n"
        )
        html = _html_document(
            "¡Gracias por tu reporte!",
            [
                f"Hola {safe_name},",
                f"Registramos tu reporte de {html_escape.escape(str(fuel_type))} a "
                f"${html_escape.escape(str(price))} en <strong>{safe_station}</strong>.",
                "Cuando otros usuarios lo confirmen quedará validado.",
            ],
            station_url,
            "Ver estación",
        )

    elif kind == NotificationKind.comment_report_thanks:
        reasons = context.get("reasons") or ""
        notes = context.get("notes") or "Sin observaciones adicionales"
        subject = "Recibimos tu reporte"
        body = (
            f"Hola {name},\n\n"
            f"Gracias por reportar un comentario en {station_name}.\n"
            f"Motivos: {reasons}\n"
            f"Observaciones: {notes}\n\n"
            "Nuestro equipo lo va a revisar.\n"
        )
        html = _html_document(
            "Gracias por ayudarnos",
            [
                f"Hola {safe_name},",
                f"Recibimos tu reporte sobre un comentario en <strong>{safe_station}</strong>.",
                f"Motivos: {html_escape.escape(reasons)}",
                f"Observaciones: {html_escape.escape(notes)}",
            ],
            station_url,
            "Ver estación",
        )

    else:
        raise ValueError(f"No email template for notification kind {kind!r}")

    return RenderedEmail(subject=subject, body=body, html=html)


async def send_notification_email(
    kind: NotificationKind, user: Users, context: dict[str, Any]
) -> bool:
    """
    Render and send a notification email to a user.

    Returns:
        True if email sent successfully, False otherwise
    """
    rendered = render_notification(kind, user, context)
    return await send_email(
        to=user.email,
        subject=rendered.subject,
        body=rendered.body,
        html=rendered.html,
    )
