"""Communication provider schemas"""

from typing import Any, Optional

from pydantic import BaseModel

PROVIDER_TYPES = ("gmail", "outlook", "smtp", "twilio", "ringcentral")


class ProviderBase(BaseModel):
    name: Optional[str] = None
    isDefault: Optional[bool] = None
    isActive: Optional[bool] = None
    clientId: Optional[str] = None
    clientSecret: Optional[str] = None
    apiKey: Optional[str] = None
    accountSid: Optional[str] = None
    authToken: Optional[str] = None
    email: Optional[str] = None
    phoneNumber: Optional[str] = None
    settings: Optional[dict[str, Any]] = None


class ProviderCreate(ProviderBase):
    # Required-ness is checked in the service so missing fields answer 400
    type: Optional[str] = None


class ProviderUpdate(ProviderBase):
    pass
