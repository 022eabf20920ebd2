from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from .responses import envelope


class EnvelopePagination(PageNumberPagination):
    """Page/limit pagination answering ``{success, data: {results, pagination}}``."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        return self.get_response(data)

    def get_response(self, data, **extra_data):
        page = self.page
        payload = {
            "results": data,
            "pagination": {
                "page": page.number,
                "limit": page.paginator.per_page,
                "total": page.paginator.count,
                "pages": page.paginator.num_pages,
            },
        }
        payload.update(extra_data)
        return Response(envelope(True, data=payload))

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean", "example": True},
                "data": {
                    "type": "object",
                    "properties": {
                        "results": schema,
                        "pagination": {
                            "type": "object",
                            "properties": {
                                "page": {"type": "integer", "example": 1},
                                "limit": {"type": "integer", "example": 20},
                                "total": {"type": "integer", "example": 42},
                                "pages": {"type": "integer", "example": 3},
                            },
                        },
                    },
                },
            },
        }
