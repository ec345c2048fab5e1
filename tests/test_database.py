import json
import unittest
import os
import sys
from unittest import mock
import psycopg2
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from event_calendar.booking.database import Booking, DatabasePersistence, MemoryBookingStore, decode_bookings
from event_calendar.booking.error_utils import StorageError

BOOKING = Booking(name='Ana', date='15/06/2024', time='10:00 a 12:00', location='Mendoza', type='boda')


class DecodeBookingsTest(unittest.TestCase):
    def test_absent_slot_is_empty(self):
        self.assertEqual(decode_bookings(None), [])

    def test_decodes_records(self):
        raw = json.dumps([BOOKING.to_dict()])
        self.assertEqual(decode_bookings(raw), [BOOKING])

    def test_corrupt_json(self):
        with self.assertRaises(StorageError):
            decode_bookings("[{not json")

    def test_not_an_array(self):
        with self.assertRaises(StorageError):
            decode_bookings('{"name": "Ana"}')

    def test_record_missing_fields(self):
        with self.assertRaises(StorageError):
            decode_bookings('[{"name": "Ana"}]')


class MemoryBookingStoreTest(unittest.TestCase):
    def test_append_and_list(self):
        store = MemoryBookingStore()
        self.assertEqual(store.list(), [])
        store.append(BOOKING)
        store.append(BOOKING)
        self.assertEqual(store.list(), [BOOKING, BOOKING])

    def test_slot_holds_json_text(self):
        slots = {}
        store = MemoryBookingStore('bookings', slots)
        store.append(BOOKING)
        self.assertEqual(json.loads(slots['bookings']), [BOOKING.to_dict()])

    def test_corrupt_slot_raises(self):
        store = MemoryBookingStore('bookings', {'bookings': 'corrupt'})
        with self.assertRaises(StorageError):
            store.list()


class DatabasePersistenceTest(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch('event_calendar.booking.database.psycopg2.connect')
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)
        self.connection = mock.MagicMock()
        self.cursor = mock.MagicMock()
        self.connection.cursor.return_value.__enter__.return_value = self.cursor
        self.connect.return_value = self.connection

    def test_creates_schema_when_missing(self):
        self.cursor.fetchone.side_effect = [(0,)]
        DatabasePersistence(dsn='dbname=test')
        statements = " ".join(call.args[0] for call in self.cursor.execute.call_args_list)
        self.assertIn("CREATE TABLE booking_slots", statements)
        self.connect.assert_called_with('dbname=test')

    def test_list_absent_slot(self):
        self.cursor.fetchone.side_effect = [(1,), None]
        store = DatabasePersistence(dsn='dbname=test')
        self.assertEqual(store.list(), [])

    def test_list_reads_named_slot(self):
        self.cursor.fetchone.side_effect = [(1,), (json.dumps([BOOKING.to_dict()]),)]
        store = DatabasePersistence('my_slot', dsn='dbname=test')
        self.assertEqual(store.list(), [BOOKING])
        self.cursor.execute.assert_called_with(mock.ANY, ('my_slot',))

    def test_append_writes_whole_array(self):
        self.cursor.fetchone.side_effect = [(1,), (json.dumps([BOOKING.to_dict()]),)]
        store = DatabasePersistence('my_slot', dsn='dbname=test')
        store.append(BOOKING)
        query, params = self.cursor.execute.call_args.args
        self.assertIn("ON CONFLICT", query)
        self.assertEqual(params[0], 'my_slot')
        self.assertEqual(json.loads(params[1]), [BOOKING.to_dict(), BOOKING.to_dict()])

    def test_query_failure_raises_storage_error(self):
        self.cursor.fetchone.side_effect = [(1,)]
        store = DatabasePersistence(dsn='dbname=test')
        self.cursor.execute.side_effect = psycopg2.DatabaseError("boom")
        with self.assertRaises(StorageError):
            store.list()

    def test_connection_failure_raises_storage_error(self):
        self.connect.side_effect = psycopg2.OperationalError("down")
        with self.assertRaises(StorageError):
            DatabasePersistence(dsn='dbname=test')


if __name__ == '__main__':
    unittest.main()
