# Models live in the feature packages; importing them here registers them with the "api" app.
from api.business.models import Business  # noqa: F401
from api.garage.models import Vehicle  # noqa: F401
from api.booking.models import Booking  # noqa: F401
