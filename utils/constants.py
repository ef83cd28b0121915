# ---------- ROLE AND STATUS CHOICES ----------

class Choices:
    ROLE_CHOICES = [
        ("CUSTOMER", "Customer"),
        ("ADMIN", "Admin"),
        ("DRIVER", "Driver"),
    ]

    TRIP_STATUS_CHOICES = [
        ("SCHEDULED", "Scheduled"),
        ("IN_TRANSIT", "In transit"),
        ("COMPLETED", "Completed"),
        ("CANCELLED", "Cancelled"),
        ("DELAYED", "Delayed"),
    ]

    BOOKING_STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("CONFIRMED", "Confirmed"),
        ("CANCELLED", "Cancelled"),
        ("REFUNDED", "Refunded"),
    ]

    # FAILED and REFUNDED are declared for the data model but no code path assigns them.
    PAYMENT_STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("COMPLETED", "Completed"),
        ("FAILED", "Failed"),
        ("REFUNDED", "Refunded"),
    ]


class Role:
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    DRIVER = "DRIVER"


class TripStatus:
    SCHEDULED = "SCHEDULED"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DELAYED = "DELAYED"


class BookingStatus:
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus:
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# Status string reported by the payment processor for a settled intent.
PROCESSOR_SUCCEEDED = "succeeded"

# Largest value a BigAutoField primary key can hold.
MAX_RECORD_ID = 2**63 - 1


# ---------- USER MESSAGES ----------
class UserMessage:
    INVALID_CREDENTIALS = "Invalid email or password."
    EMAIL_ALREADY_EXISTS = "Email already exists."
    PASSWORD_NOT_MATCH = "Passwords do not match."
    USER_DELETED = "User deleted successfully."
    CANNOT_DELETE_SELF = "Administrators cannot delete their own account."


class GeneralMessage:
    INVALID_INPUT = "Invalid input provided."
    NOT_FOUND = "Not found."
    PERMISSION_DENIED = "You do not have permission to perform this action."
    SERVER_ERROR = "Server error"
    UPSTREAM_FAILURE = "Payment provider is unavailable. Please try again later."


# ----------- ROUTE CONSTANTS -------------
class RouteMessage:
    ROUTE_NOT_FOUND = "Route not found."
    ROUTE_ALREADY_EXISTS = "Route already exists between these cities."
    ORIGIN_AND_DESTINATION_REQUIRED = "Origin and destination are required."
    ORIGIN_AND_DESTINATION_SAME = "Origin and destination must be different."
    ROUTE_HAS_FUTURE_TRIPS = "Cannot delete a route with scheduled trips."
    ROUTE_DELETED = "Route deleted successfully."
    INVALID_DATE = "Date must be in YYYY-MM-DD format."
    INVALID_PASSENGERS = "Passengers must be an integer between 1 and 10."


# Number of routes returned by the popularity ranking.
POPULAR_ROUTES_LIMIT = 10


# ----------- BUS CONSTANTS -------------
class BusMessage:
    BUS_NOT_FOUND = "Bus not found."
    BUS_ALREADY_EXISTS = "Bus with this plate number already exists."
    INVALID_CAPACITY = "Capacity must be a positive integer."


# ----------- TRIP CONSTANTS -------------
class TripMessage:
    TRIP_NOT_FOUND = "Trip not found"
    ARRIVAL_BEFORE_DEPARTURE = "Arrival time must be after departure time."
    INVALID_PRICE = "Price must be greater than zero."


# ----------- BOOKING CONSTANTS -------------
class BookingMessage:
    BOOKING_NOT_FOUND = "Booking not found"
    NOT_ENOUGH_SEATS = "Not enough available seats"
    SEAT_NUMBERS_REQUIRED = "At least one seat number is required."
    SEAT_NUMBERS_INVALID = "Seat numbers must be positive integers."
    BOOKING_CREATED = "Booking created. Complete the payment before the hold expires."
    BOOKINGS_RELEASED = "Released {count} expired booking(s)."


# ----------- PAYMENT CONSTANTS -------------
class PaymentMessage:
    PAYMENT_NOT_FOUND = "Payment not found"
    PAYMENT_CONFIRMED = "Payment confirmed successfully"
    PAYMENT_NOT_COMPLETED = "Payment not completed"
    PAYMENT_INTENT_REQUIRED = "Payment intent id is required."
    BOOKING_REQUIRED = "Booking id is required."
    PAYMENT_INTENT_CREATED = "Payment intent created"
    BOOKING_NOT_PAYABLE = "Booking is no longer awaiting payment"
