from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from dataclasses import dataclass
from urllib.parse import quote, urlencode
import base64
import logging
import re

from .booking_utils import BookingRequest, pack_names

logger = logging.getLogger(__name__)

CHAT_WEBHOOK_URL = 'https://api.callmebot.com/whatsapp.php'
MAPS_SEARCH_URL = 'https://www.google.com/maps/search/?api=1&query='
WHATSAPP_URL = 'https://wa.me/'
DIVIDER = '━━━━━━━━━━━━━━━━━━'


@dataclass(frozen=True)
class NotificationSettings:
    owner_name: str = 'Saavedra Producciones'
    owner_email: str = 'contacto@saavedraproducciones.com'
    owner_phone: str = ''
    sender_email: str = 'noreply@saavedraproducciones.com'
    callmebot_api_key: str = ''
    signature: str = 'DJ-MECHA'


@dataclass(frozen=True)
class NotificationPayload:
    """
    Everything an outbound collaborator needs to tell the owner about a new request.
    Delivery itself happens elsewhere.
    """
    recipient: str
    subject: str
    email: dict
    template_params: dict
    chat_message: str
    chat_url: str
    reply_link: str
    maps_link: str

    def to_dict(self):
        return {
            "recipient": self.recipient,
            "subject": self.subject,
            "email": self.email,
            "template_params": self.template_params,
            "chat_message": self.chat_message,
            "chat_url": self.chat_url,
            "reply_link": self.reply_link,
            "maps_link": self.maps_link,
        }


def create_message(to, from_email, subject, body):
    message = MIMEMultipart()
    message['to'] = to
    message['from'] = from_email
    message['subject'] = subject

    message.attach(MIMEText(body, 'plain'))

    # base64url encoded like the Gmail API expects
    raw = base64.urlsafe_b64encode(message.as_bytes()).decode()
    return {'raw': raw}


def maps_link(location: str) -> str:
    return f"{MAPS_SEARCH_URL}{quote(location, safe='')}"


def reply_link(request: BookingRequest, settings: NotificationSettings) -> str:
    """
    WhatsApp link that opens a chat with the client, prefilled with a reply.
    """
    client_phone = re.sub(r'\D', '', request.phone)
    greeting = (f"Hola {request.name}! Soy {settings.signature} de {settings.owner_name} 🎧. "
                f"Recibí tu consulta por el evento del día {request.selected_date} en {request.location}. "
                f"¿Cómo estás? Me gustaría contarte más sobre nuestro servicio.")
    return f"{WHATSAPP_URL}{client_phone}?text={quote(greeting, safe='')}"


def template_params(request: BookingRequest, settings: NotificationSettings) -> dict:
    packs = ', '.join(pack_names(request.packs))
    return {
        'from_name': request.name,
        'from_email': request.email,
        'phone': request.phone,
        'event_type': request.event_type,
        'event_time': request.event_time,
        'location': request.location,
        'selected_date': request.selected_date,
        'packs': packs or 'Ninguno',
        'message': request.message,
        'to_name': settings.owner_name,
    }


def format_chat_message(request: BookingRequest, settings: NotificationSettings) -> str:
    packs = ', '.join(pack_names(request.packs)) or 'Sin packs seleccionados'
    lines = [
        "*📻 NUEVA CONSULTA*",
        DIVIDER,
        f"👤 *Nombre:* {request.name}",
        f"📅 *Fecha:* {request.selected_date}",
        f"⏰ *Hora:* {request.event_time}",
        f"📍 *Lugar:* {request.location}",
        f"🗺️ *Ver Mapa:* {maps_link(request.location)}",
        f"🎉 *Evento:* {request.event_type.upper()}",
        f"📦 *Packs:* {packs}",
        f"📱 *Tel:* {request.phone}",
        f"✉️ *Email:* {request.email}",
        DIVIDER,
        f"💬 *Mensaje:* {request.message}",
        "",
        "👉 *RESPONDER AL CLIENTE:*",
        reply_link(request, settings),
    ]
    return "\n".join(lines)


def format_email_body(params: dict) -> str:
    return "\n".join([
        f"Nueva consulta para {params['to_name']}",
        "",
        f"Nombre: {params['from_name']}",
        f"Email: {params['from_email']}",
        f"Teléfono: {params['phone']}",
        f"Evento: {params['event_type']}",
        f"Fecha: {params['selected_date']}",
        f"Hora: {params['event_time']}",
        f"Lugar: {params['location']}",
        f"Packs: {params['packs']}",
        "",
        params['message'],
    ])


def build_notification(request: BookingRequest, settings: NotificationSettings) -> NotificationPayload:
    params = template_params(request, settings)
    subject = f"Nueva consulta: {request.event_type} {request.selected_date} - {request.name}"
    chat_message = format_chat_message(request, settings)
    chat_url = f"{CHAT_WEBHOOK_URL}?" + urlencode({
        'phone': settings.owner_phone,
        'text': chat_message,
        'apikey': settings.callmebot_api_key,
    })
    if not settings.owner_phone or not settings.callmebot_api_key:
        logger.info("Chat notification is not configured, chat_url will be rejected by the webhook.")

    return NotificationPayload(
        recipient=settings.owner_email,
        subject=subject,
        email=create_message(settings.owner_email, settings.sender_email, subject, format_email_body(params)),
        template_params=params,
        chat_message=chat_message,
        chat_url=chat_url,
        reply_link=reply_link(request, settings),
        maps_link=maps_link(request.location),
    )
