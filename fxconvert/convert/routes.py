"""Route handlers for currency conversion."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from fxconvert.errors import APIError, ServiceUnavailableError
from fxconvert.schemas import ConversionQuerySchema, ConversionResultSchema, ErrorMessageSchema
from fxconvert.services import CONVERSION_EXT_KEY, ConversionError, ConversionService

from . import blp

RESULT_DECIMALS = 2


@blp.route("")
class Convert(MethodView):
    @blp.arguments(ConversionQuerySchema, location="query")
    @blp.response(200, ConversionResultSchema())
    @blp.alt_response(422, schema=ErrorMessageSchema(), description="Unknown currency")
    @blp.alt_response(502, schema=ErrorMessageSchema(), description="Invalid rate data")
    @blp.alt_response(503, schema=ErrorMessageSchema(), description="Rates not loaded yet")
    def get(self, args):
        """Convert an amount between two currencies using the cached rates."""

        service: ConversionService | None = current_app.extensions.get(CONVERSION_EXT_KEY)
        if service is None:
            raise ServiceUnavailableError("Conversion service unavailable.")

        try:
            quote = service.quote(args["amount"], args["from_code"], args["to_code"])
        except ConversionError:
            raise
        except ValueError as exc:
            raise APIError(str(exc), status_code=422, payload={"error": "invalid_parameter"}) from exc

        return {
            "result": round(quote.result, RESULT_DECIMALS),
            "from_code": quote.from_code,
            "to_code": quote.to_code,
            "amount": quote.amount,
            "timestamp": quote.timestamp,
        }
