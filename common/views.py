"""View mixins shared across apps."""

from .responses import envelope


class EnvelopeMixin:
    """Wrap successful generic-view payloads into the response envelope.

    Bodies that already carry ``success`` (paginated lists, hand-built
    responses) and empty bodies (204) pass through untouched.
    """

    envelope_key = None

    def finalize_response(self, request, response, *args, **kwargs):
        data = getattr(response, "data", None)
        if response.status_code < 400 and data is not None and not (isinstance(data, dict) and "success" in data):
            if self.envelope_key:
                data = {self.envelope_key: data}
            response.data = envelope(True, data=data)
        return super().finalize_response(request, response, *args, **kwargs)
