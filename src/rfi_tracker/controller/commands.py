"""Tagged commands accepted by ``ViewStateController.dispatch``.

One command per user interaction. Commands validate their own payload, so
handlers only ever see well-formed input.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rfi_tracker.pipeline.windows import Granularity, coerce_anchor

__all__ = [
    'MapClick',
    'GranularityChange',
    'DateChange',
    'OpacityChange',
    'ChartPointActivated',
    'ExampleSiteSelected',
    'Command',
]


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class MapClick(_Command):
    kind: Literal["map_click"] = "map_click"
    lon: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)


class GranularityChange(_Command):
    kind: Literal["granularity_change"] = "granularity_change"
    granularity: Granularity

    @field_validator("granularity", mode="before")
    @classmethod
    def parse_granularity(cls, v):
        return Granularity.parse(v)


class DateChange(_Command):
    kind: Literal["date_change"] = "date_change"
    anchor: date

    @field_validator("anchor", mode="before")
    @classmethod
    def parse_anchor(cls, v):
        return coerce_anchor(v)


class OpacityChange(_Command):
    kind: Literal["opacity_change"] = "opacity_change"
    value: float = Field(ge=0, le=1)


class ChartPointActivated(_Command):
    """A picked chart point, by position in the series or by timestamp."""
    kind: Literal["chart_point_activated"] = "chart_point_activated"
    index: Optional[int] = None
    timestamp: Optional[Union[datetime, date]] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        """Bare ISO dates stay dates; anything with a time part is a datetime."""
        if isinstance(v, str):
            text = v.strip()
            try:
                return date.fromisoformat(text)
            except ValueError:
                return pd.Timestamp(text).to_pydatetime()
        return v

    @model_validator(mode="after")
    def exactly_one_locator(self):
        if (self.index is None) == (self.timestamp is None):
            raise ValueError("Give exactly one of index or timestamp")
        return self


class ExampleSiteSelected(_Command):
    kind: Literal["example_site_selected"] = "example_site_selected"
    name: str


Command = Annotated[
    Union[MapClick, GranularityChange, DateChange, OpacityChange,
          ChartPointActivated, ExampleSiteSelected],
    Field(discriminator="kind"),
]
