import json
import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import asdict, dataclass, fields
from typing import Dict, List

import psycopg2

from .error_utils import StorageError

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# Name of the single key-value slot holding every booking as a JSON array
DEFAULT_STORAGE_KEY = 'saavedra_bookings'


@dataclass(frozen=True)
class Booking:
    """
    A submitted event booking. Never updated or deleted once stored.
    date is "DD/MM/YYYY" and time is the free text range picked on the form, e.g. "10:00 a 12:00".
    """
    name: str
    date: str
    time: str
    location: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, record) -> 'Booking':
        try:
            return cls(**{field.name: str(record[field.name]) for field in fields(cls)})
        except (KeyError, TypeError) as e:
            raise StorageError(f"Stored booking is missing fields: {record!r}") from e


def decode_bookings(raw) -> List[Booking]:
    """
    Decodes the JSON text of a storage slot. An absent slot (None) is an empty list.
    Raises StorageError if the text is not a JSON array of booking records.
    """
    if raw is None:
        return []
    try:
        records = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageError("Stored bookings are not valid JSON.") from e
    if not isinstance(records, list):
        raise StorageError("Stored bookings are not a JSON array.")
    return [Booking.from_dict(record) for record in records]


def encode_bookings(bookings: List[Booking]) -> str:
    return json.dumps([booking.to_dict() for booking in bookings])


class BookingStore(ABC):
    """
    Port the availability engine reads bookings through.
    Single writer, single reader: no versioning or locking between concurrent clients.
    """

    @abstractmethod
    def list(self) -> List[Booking]:
        """Every booking ever recorded, unfiltered."""

    @abstractmethod
    def append(self, booking: Booking) -> None:
        """Adds a booking to the end of the stored list."""


class MemoryBookingStore(BookingStore):
    """
    Keeps the slot as JSON text in process memory, behaving like the browser local storage slot.
    Used for tests and local development without Postgres.
    """
    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY, slots: Dict[str, str] = None):
        self.storage_key = storage_key
        self.slots = slots if slots is not None else {}

    def list(self) -> List[Booking]:
        return decode_bookings(self.slots.get(self.storage_key))

    def append(self, booking: Booking) -> None:
        current = self.list()
        current.append(booking)
        self.slots[self.storage_key] = encode_bookings(current)
        logger.info("Stored booking for %s on %s", booking.name, booking.date)


class DatabasePersistence(BookingStore):
    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY, dsn: str = None):
        self.storage_key = storage_key
        self._dsn = dsn
        self._setup_schema()

    @contextmanager
    def _database_connect(self):
        """
        Internal function to manage the Postgres database connections.
        Must include environment variable for database url path when deploying to production.
        """
        try:
            if self._dsn:
                connection = psycopg2.connect(self._dsn)
            elif os.environ.get('FLASK_ENV') == 'production':
                connection = psycopg2.connect(os.environ['DATABASE_URL'])
            else:
                connection = psycopg2.connect(dbname='event_calendar')
        except psycopg2.OperationalError as e:
            logger.error(f"Database connection failed: {e.args}")
            raise StorageError("Booking storage is unavailable.") from e
        try:
            with connection:
                yield connection
        finally:
            connection.close()

    def _setup_schema(self):
        """
        Internal function to set-up the key-value table if it does not exist.
        The payload column is text so a corrupt slot is reported as a StorageError instead of failing inside Postgres.
        """
        with self._database_connect() as conn:
            with conn.cursor() as cursor:
                cursor.execute("""
                    SELECT COUNT(*)
                    FROM information_schema.tables
                    WHERE table_schema = 'public' AND table_name = 'booking_slots';
                """)
                if cursor.fetchone()[0] == 0:
                    logger.info("Setting up the schema.")
                    cursor.execute("""
                        CREATE TABLE booking_slots (
                        slot_key text PRIMARY KEY,
                        payload text NOT NULL,
                        updated_at timestamp with time zone DEFAULT CURRENT_TIMESTAMP NOT NULL);
                    """)

    def _read_slot(self, cursor):
        query = "SELECT payload FROM booking_slots WHERE slot_key = %s"
        logger.info("Executing query: %s", query)
        cursor.execute(query, (self.storage_key,))
        row = cursor.fetchone()
        return row[0] if row else None

    def list(self) -> List[Booking]:
        with self._database_connect() as conn:
            with conn.cursor() as cursor:
                try:
                    raw = self._read_slot(cursor)
                except psycopg2.DatabaseError as e:
                    logger.error(f"Booking retrieval failed: {e.args}")
                    raise StorageError("Could not read bookings.") from e
        return decode_bookings(raw)

    def append(self, booking: Booking) -> None:
        """
        Read-modify-write of the whole slot inside one transaction.
        """
        query = """INSERT INTO booking_slots (slot_key, payload) VALUES (%s, %s)
                   ON CONFLICT (slot_key) DO UPDATE SET payload = EXCLUDED.payload, updated_at = CURRENT_TIMESTAMP;"""
        with self._database_connect() as conn:
            with conn.cursor() as cursor:
                try:
                    current = decode_bookings(self._read_slot(cursor))
                    current.append(booking)
                    logger.info("Executing query: %s", query)
                    cursor.execute(query, (self.storage_key, encode_bookings(current)))
                except psycopg2.DatabaseError as e:
                    logger.error(f"Booking insertion failed: {e.args}")
                    raise StorageError("Could not store the booking.") from e
        logger.info("Stored booking for %s on %s", booking.name, booking.date)
