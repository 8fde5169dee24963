from datetime import datetime
from decimal import Decimal
from typing import Annotated
from pydantic import AfterValidator, PlainSerializer
from billing.utils.timeutils import to_utc

# Money and rates are Decimal in Python but go out over JSON as plain numbers,
# not as the fixed-point strings pydantic emits for Decimal by default.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Incoming timestamps with any UTC offset are stored as UTC
UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]
