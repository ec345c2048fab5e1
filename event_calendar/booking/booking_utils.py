# Utility functions for booking submission
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List

import phonenumbers
from email_validator import EmailNotValidError, validate_email

from .availability import parse_booking_date
from .database import Booking
from .error_utils import BookingValidationError

DEFAULT_EVENT_TYPE = 'boda'

# Pack ids offered on the form. 'all' is a shortcut for every other pack
AVAILABLE_PACKS = {
    'all': 'TODO (PACK COMPLETO)',
    'sonido': 'Sonido Profesional',
    'iluminacion': 'Iluminación DJ',
    'pantalla': 'Pantalla LED / TV',
    'fx': 'Efectos Especiales',
    'fotos': 'Foto y Video',
}

MAX_NAME_LENGTH = 100
MAX_FIELD_LENGTH = 200
MAX_PHONE_LENGTH = 50
# 254 characters is a common maximum for email addresses by RFC 5321 / 5322 standards
MAX_EMAIL_LENGTH = 254
MAX_MESSAGE_LENGTH = 1000

REQUIRED_FIELDS = ('name', 'email', 'phone', 'eventType', 'eventTime', 'location', 'message', 'selectedDate')


@dataclass(frozen=True)
class BookingRequest:
    """Validated contact form submission."""
    name: str
    email: str
    phone: str
    event_type: str
    event_time: str
    location: str
    message: str
    selected_date: str
    packs: List[str] = field(default_factory=list)

    def to_booking(self) -> Booking:
        return Booking(name=self.name, date=self.selected_date, time=self.event_time,
                       location=self.location, type=self.event_type)


def sanitize_phone(phone: str, region: str = 'AR') -> str:
    phone = phone.strip()

    if len(phone) > MAX_PHONE_LENGTH:
        raise BookingValidationError('Phone number input is too long', field='phone')

    # Allowed characters: an optional leading '+', digits, spaces, hyphens, and parentheses.
    allowed_pattern = re.compile(r'^\+?[0-9\-\(\)\s]+$')
    if not allowed_pattern.fullmatch(phone):
        raise BookingValidationError('Phone contains disallowed characters', field='phone')

    try:
        # A leading '+' is an international number, otherwise assume the business region
        if phone.startswith('+'):
            parsed_phone = phonenumbers.parse(phone, None)
        else:
            parsed_phone = phonenumbers.parse(phone, region)
    except phonenumbers.NumberParseException as e:
        raise BookingValidationError('Invalid phone number format', field='phone') from e

    if not phonenumbers.is_possible_number(parsed_phone) or not phonenumbers.is_valid_number(parsed_phone):
        raise BookingValidationError('Phone number is not valid', field='phone')

    # Canonical, international E.164 format.
    return phonenumbers.format_number(parsed_phone, phonenumbers.PhoneNumberFormat.E164)


def sanitize_email(email: str) -> str:
    email = email.strip()

    if len(email) > MAX_EMAIL_LENGTH:
        raise BookingValidationError('Email input is too long', field='email')

    try:
        # No DNS lookups on submission
        valid = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise BookingValidationError(f'Invalid email format: {str(e)}', field='email') from e
    return valid.normalized


def sanitize_message(body: str) -> str:
    """
    Sanitizes the free text message of a submission.

    The function:
      1. Trims leading and trailing whitespace.
      2. Enforces a maximum length (to avoid oversized inputs).
      3. Checks for disallowed control characters (allowing only common whitespace).
    """
    body = body.strip()

    if len(body) > MAX_MESSAGE_LENGTH:
        raise BookingValidationError('Message is too long. Max 1000 characters.', field='message')

    # Allow: newline (LF, \n), carriage return (CR, \r), and tab (\t).
    allowed_control_codes = {9, 10, 13}
    for ch in body:
        if ord(ch) < 32 and ord(ch) not in allowed_control_codes:
            raise BookingValidationError('Message contains disallowed characters', field='message')
    return body


def sanitize_text(value: str, field_name: str, max_length: int = MAX_FIELD_LENGTH) -> str:
    value = value.strip()
    if len(value) > max_length:
        raise BookingValidationError(f'{field_name} is too long', field=field_name)
    if any(ord(ch) < 32 for ch in value):
        raise BookingValidationError(f'{field_name} contains disallowed characters', field=field_name)
    return value


def validate_selected_date(value: str) -> str:
    """
    Checks the DD/MM/YYYY date picked on the calendar names a real day and returns it zero-padded.
    """
    parsed = parse_booking_date(value.strip())
    if parsed is None:
        raise BookingValidationError('Select a date on the calendar', field='selectedDate')
    day, month, year = parsed
    try:
        date(year, month + 1, day)
    except ValueError as e:
        raise BookingValidationError('Selected date does not exist', field='selectedDate') from e
    return f"{day:02d}/{month + 1:02d}/{year}"


def resolve_packs(pack_ids: Iterable[str]) -> List[str]:
    """
    Validates selected pack ids, expanding 'all' to every pack. Keeps form order without duplicates.
    """
    every_pack = [pack_id for pack_id in AVAILABLE_PACKS if pack_id != 'all']
    resolved = []
    for pack_id in pack_ids:
        if pack_id not in AVAILABLE_PACKS:
            raise BookingValidationError(f'Unknown pack: {pack_id}', field='packs')
        for selected in (every_pack if pack_id == 'all' else [pack_id]):
            if selected not in resolved:
                resolved.append(selected)
    return resolved


def pack_names(pack_ids: Iterable[str]) -> List[str]:
    return [AVAILABLE_PACKS[pack_id] for pack_id in pack_ids]


def validate_booking_form(form, phone_region: str = 'AR') -> BookingRequest:
    """
    Validates a contact form submission.

    Input: a werkzeug MultiDict (request.form) or any mapping. 'packs' may repeat.

    Returns: BookingRequest with normalized email and E.164 phone.
    Raises BookingValidationError naming the first offending field.
    """
    values = {name: str(form.get(name) or '').strip() for name in REQUIRED_FIELDS}
    if not values['eventType']:
        values['eventType'] = DEFAULT_EVENT_TYPE

    missing = [name for name in REQUIRED_FIELDS if not values[name]]
    if missing:
        raise BookingValidationError('Please complete every field and select a date on the calendar.',
                                     field=missing[0])

    if hasattr(form, 'getlist'):
        raw_packs = form.getlist('packs')
    else:
        raw_packs = form.get('packs') or []
        # A JSON body may send a single pack as a bare string
        if isinstance(raw_packs, str):
            raw_packs = [raw_packs]
        if not isinstance(raw_packs, list) or not all(isinstance(pack_id, str) for pack_id in raw_packs):
            raise BookingValidationError('packs must be a list of pack ids', field='packs')

    return BookingRequest(
        name=sanitize_text(values['name'], 'name', MAX_NAME_LENGTH),
        email=sanitize_email(values['email']),
        phone=sanitize_phone(values['phone'], phone_region),
        event_type=sanitize_text(values['eventType'], 'eventType').lower(),
        event_time=sanitize_text(values['eventTime'], 'eventTime'),
        location=sanitize_text(values['location'], 'location'),
        message=sanitize_message(values['message']),
        selected_date=validate_selected_date(values['selectedDate']),
        packs=resolve_packs(raw_packs),
    )


def parse_blackout_dates(raw: str) -> List[date]:
    """
    Parses a comma separated list of DD/MM/YYYY blackout dates from configuration.
    Raises ValueError on an entry that is not a real date so a misconfiguration fails at startup.
    """
    blackout_dates = []
    for entry in (raw or '').split(','):
        entry = entry.strip()
        if not entry:
            continue
        parsed = parse_booking_date(entry)
        if parsed is None:
            raise ValueError(f"Invalid blackout date: {entry}")
        day, month, year = parsed
        blackout_dates.append(date(year, month + 1, day))
    return blackout_dates
