"""Pydantic request models for the CargoTrack API.

Field names follow the camelCase JSON used by the web client; snake_case
names are accepted too.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TrackRequest(_CamelModel):
    tracking_number: Optional[str] = Field(None, alias="trackingNumber")
    preferred_provider: Optional[str] = Field(None, alias="preferredProvider")
    carrier_hint: Optional[str] = Field(None, alias="carrierHint")
    shipment_type: Optional[str] = Field(None, alias="shipmentType")
    gocomet_token: Optional[str] = Field(None, alias="gocometToken")


class BatchTrackRequest(_CamelModel):
    tracking_numbers: List[str] = Field(default_factory=list, alias="trackingNumbers")
    shipment_type: Optional[str] = Field(None, alias="shipmentType")


class GocometTokenRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
