import logging
import os
import secrets
from functools import wraps
from flask import Flask, request, redirect, g, url_for, jsonify, current_app
from flask_debugtoolbar import DebugToolbarExtension
from flask_httpauth import HTTPBasicAuth
from werkzeug.exceptions import NotFound
from werkzeug.security import generate_password_hash, check_password_hash
from event_calendar.booking import calendar as booking_calendar
from event_calendar.booking import booking_utils as util
from event_calendar.booking.availability import AvailabilityService, format_selected_date
from event_calendar.booking.database import DEFAULT_STORAGE_KEY, DatabasePersistence
from event_calendar.booking.error_utils import BookingValidationError, StorageError
from event_calendar.booking.notifications import NotificationSettings, build_notification
logger = logging.getLogger(__name__)


def _default_store_factory():
    return DatabasePersistence(os.environ.get('BOOKINGS_STORAGE_KEY', DEFAULT_STORAGE_KEY))


def create_app(store_factory=None):
    app = Flask(__name__)
    app.secret_key = secrets.token_hex(32) #256 bit
    app.config['SECRET_KEY'] = app.secret_key
    if os.environ.get('FLASK_ENV') == 'production':
        app.config['DOMAIN'] = 'https://www.saavedraproducciones.com'
    else:
        app.config['DOMAIN'] = 'http://localhost:5003'
        app.config["DEBUG_TB_INTERCEPT_REDIRECTS"] = False  # Prevents redirect issues
    app.config['BOOKING_STORE_FACTORY'] = store_factory or _default_store_factory
    # Manual blackout days, none by default
    app.config['BLACKOUT_DATES'] = util.parse_blackout_dates(os.environ.get('BLACKOUT_DATES', ''))
    app.config['PHONE_REGION'] = os.environ.get('PHONE_REGION', 'AR')
    app.config['NOTIFICATIONS'] = NotificationSettings(
        owner_name=os.environ.get('OWNER_NAME', NotificationSettings.owner_name),
        owner_email=os.environ.get('OWNER_EMAIL', NotificationSettings.owner_email),
        owner_phone=os.environ.get('OWNER_PHONE', ''),
        callmebot_api_key=os.environ.get('CALLMEBOT_API_KEY', ''),
    )
    _register_routes(app)
    return app


auth = HTTPBasicAuth()

# Must set this in prod
prod_hash = os.getenv('HASH_ADMIN')

if prod_hash:
    users = {
        "admin": generate_password_hash(prod_hash)
    }
else: # For dev
    users = {
        "admin": generate_password_hash('secret')
    }


@auth.verify_password
def verify_password(username, password):
    if username in users and check_password_hash(users.get(username), password):
        return username


# Use decorator to create g.availability within request context so every request reads the store once, fresh
def instantiate_availability(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        store = current_app.config['BOOKING_STORE_FACTORY']()
        g.availability = AvailabilityService(store, current_app.config['BLACKOUT_DATES'])
        return f(*args, **kwargs)
    return decorated_function


def _month_from_args():
    """
    Month in the query string is 1-12, the engine works with 0-11.
    Falls back to the current month when absent.
    """
    default = booking_calendar.current()
    try:
        year = int(request.args.get('year', default.year))
        month = int(request.args.get('month', default.month + 1))
    except ValueError:
        raise BookingValidationError('year and month must be integers')
    if not 1 <= month <= 12:
        raise BookingValidationError('month must be between 1 and 12')
    # Keep previous/next navigation inside the range the calendar module supports
    if not 1 < year < 9999:
        raise BookingValidationError('year is out of range')
    return booking_calendar.build(year, month - 1)


def _navigation(calendar_month):
    return {"year": calendar_month.year, "month": calendar_month.month + 1,
            "url": url_for('get_calendar', year=calendar_month.year, month=calendar_month.month + 1)}


def _register_routes(app):

    @app.route('/')
    def home():
        return redirect(url_for('get_calendar'))

    # Month grid state for the calendar widget
    @app.route("/calendar", methods=['GET'])
    @instantiate_availability
    def get_calendar():
        calendar_month = _month_from_args()
        view = g.availability.month_view(calendar_month)
        data = view.to_dict()
        data["previous"] = _navigation(calendar_month.previous())
        data["next"] = _navigation(calendar_month.next())
        return jsonify(data)

    # Selecting a day on the grid
    @app.route("/calendar/<int:year>/<int:month>/<int:day>/slots", methods=['GET'])
    @instantiate_availability
    def get_day_slots(year, month, day):
        if not 1 <= month <= 12 or not 1 <= year <= 9999:
            raise NotFound()
        calendar_month = booking_calendar.build(year, month - 1)
        if day not in calendar_month.days:
            raise NotFound()
        slots = g.availability.available_slots(year, month - 1, day)
        return jsonify({
            "date": format_selected_date(year, month - 1, day),
            "unavailable": slots is None,
            "slots": None if slots is None else [slot.to_dict() for slot in slots],
        })

    @app.route("/bookings", methods=["POST"])
    @instantiate_availability
    def submit_booking():
        body = request.get_json(silent=True)
        if body is None:
            form = request.form
        elif isinstance(body, dict):
            form = body
        else:
            raise BookingValidationError('Invalid booking submission.')
        booking_request = util.validate_booking_form(form, current_app.config['PHONE_REGION'])
        booking = booking_request.to_booking()
        g.availability.add_booking(booking)
        logger.info("Booking submitted for %s at %s", booking.date, booking.time)
        payload = build_notification(booking_request, current_app.config['NOTIFICATIONS'])
        return jsonify({"booking": booking.to_dict(), "notification": payload.to_dict()}), 201

    # Admin only
    @app.route("/admin/bookings", methods=['GET'])
    @auth.login_required
    @instantiate_availability
    def list_bookings():
        return jsonify([booking.to_dict() for booking in g.availability.get_bookings()])

    @app.errorhandler(404)
    def error_handler(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(BookingValidationError)
    def handle_invalid_booking(error):
        return jsonify({"error": error.message, "field": error.field}), 422

    # Storage failures are surfaced, never read as an empty calendar
    @app.errorhandler(StorageError)
    def handle_storage_error(error):
        logger.error(f"Storage error: {error.message}")
        return jsonify({"error": "Bookings are temporarily unavailable. Please try again later."}), 503


if __name__ == '__main__':
    app = create_app()
    # production
    if os.environ.get('FLASK_ENV') == 'production':
       app.run(debug=False)
    else:
       app.debug = True
       toolbar = DebugToolbarExtension(app)
       app.run(debug=True, port=5003)
