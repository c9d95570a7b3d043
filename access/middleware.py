from django.utils.deprecation import MiddlewareMixin

MAX_LOCATION_LENGTH = 100


class GateLocationMiddleware(MiddlewareMixin):
    """Attach the gate/post chosen by the operator at login to the request."""

    def process_request(self, request):
        location = (request.META.get('HTTP_X_GATE_LOCATION') or '').strip() or None
        if location:
            location = location[:MAX_LOCATION_LENGTH]
        request.gate_location = location
