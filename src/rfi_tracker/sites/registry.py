"""Example site registry.

Named presets that reconfigure the tracker to a known emitter: where to
look, which date, what opacity, what to outline, and the narrative shown
alongside. The registry is data only and is validated at import time; the
controller decides how a site is applied.
"""

from datetime import date
from types import MappingProxyType
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ['NarrativeLabel', 'Annotation', 'ExampleSite', 'SITE_REGISTRY', 'get_site', 'site_names']

Ring = tuple[tuple[float, float], ...]


class NarrativeLabel(BaseModel):
    """One paragraph of site narrative, optionally linking to a source."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    url: Optional[str] = None


class Annotation(BaseModel):
    """Outlined ground feature drawn on top of the imagery."""

    model_config = ConfigDict(frozen=True)

    name: str
    color: str
    polygons: tuple[Ring, ...]
    width: int = Field(5, ge=1)

    @field_validator("polygons")
    @classmethod
    def check_rings(cls, v):
        for ring in v:
            if len(ring) < 3:
                raise ValueError("polygon ring needs at least 3 vertices")
            for lon, lat in ring:
                if not (-180 <= lon <= 180 and -90 <= lat <= 90):
                    raise ValueError(f"vertex ({lon}, {lat}) outside lon/lat range")
        return v


class ExampleSite(BaseModel):
    """Immutable preset applied by ``ViewStateController.on_example_site_selected``."""

    model_config = ConfigDict(frozen=True)

    name: str
    lon: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)
    zoom: int = Field(ge=0, le=24)
    anchor_date: date
    opacity: float = Field(ge=0, le=1)
    narrative: tuple[NarrativeLabel, ...] = Field(min_length=1)
    annotations: tuple[Annotation, ...] = ()


def _box(west: float, south: float, east: float, north: float) -> Ring:
    return ((west, north), (west, south), (east, south), (east, north))


_SITES = (
    ExampleSite(
        name="Dammam, Saudi Arabia",
        lon=49.949916,
        lat=26.606379,
        zoom=19,
        anchor_date=date(2022, 1, 1),
        opacity=0.1,
        narrative=(
            NarrativeLabel(
                text="This is a MIM-104 Patriot PAC-2 missile defense system stationed at an "
                     "Aramco oil refinery in Dammam, Saudi Arabia. At the center of the system "
                     "are three vehicles: the AN/MPQ-53 radar (red), the control station (blue), "
                     "and the power generator truck (green). The black boxes indicate the missile "
                     "launcher trucks."
            ),
            NarrativeLabel(
                text="This video provides an overview of the Patriot missile system.",
                url="https://youtu.be/NG8wF1o6r58?t=29",
            ),
            NarrativeLabel(
                text="By gradually zooming out and increasing the opacity of the Synthetic "
                     "Aperture Radar layer using the slider above, it becomes clear that the "
                     "radar on this missile defense system is causing significant interference "
                     "with the Sentinel-1 satellite."
            ),
            NarrativeLabel(
                text="The RFI Graph above shows that the radar was first turned on at this "
                     "location around April 26th, 2021. There is a drop in interference in July "
                     "and August, suggesting that it was turned off during this period. The "
                     "radar comes back online in September, and has been on ever since."
            ),
        ),
        annotations=(
            Annotation(
                name="radar",
                color="red",
                polygons=(_box(49.95055676743417, 26.605668090179968,
                               49.9506694202128, 26.60577361047956),),
            ),
            Annotation(
                name="power",
                color="green",
                polygons=(_box(49.95069356009393, 26.605602139943276,
                               49.950796825141005, 26.6057028639258),),
            ),
            Annotation(
                name="control",
                color="blue",
                polygons=(_box(49.9507780496779, 26.605497818582162,
                               49.95088399693399, 26.605594945369706),),
            ),
            Annotation(
                name="launchers",
                color="black",
                polygons=(
                    _box(49.949325633496336, 26.6054690527739,
                         49.94951338812738, 26.60563452803374),
                    _box(49.94854242846399, 26.60532396195055,
                         49.948700678795866, 26.6054582609008),
                    _box(49.9505621318522, 26.606833592010936,
                         49.950706971139006, 26.606960694701094),
                    _box(49.9504172925654, 26.60769968025089,
                         49.95055140301614, 26.60782678197863),
                ),
            ),
        ),
    ),
    ExampleSite(
        name="Dimona Radar Facility, Israel",
        lon=35.0948799,
        lat=30.9685089,
        zoom=11,
        anchor_date=date(2019, 2, 19),
        opacity=0.8,
        narrative=(
            NarrativeLabel(
                text="Located in Israel's Negev Desert, the Dimona Radar Facility is a "
                     "\"top-secret X-band radar staffed by around 120 American technicians\".",
                url="http://content.time.com/time/world/article/0,8599,1846749,00.html",
            ),
            NarrativeLabel(
                text="The radar can monitor the take-off of any aircraft or missile up to 1,500 "
                     "miles away, which would give Israel an extra 60-70 seconds to react if "
                     "Iran fired a missile. The radar is so powerful that Israeli officials "
                     "feared that RFI would impact the accuracy of anti-tank missiles being "
                     "tested nearby."
            ),
            NarrativeLabel(
                text="Israel's Negev Nuclear Research Center is located in the same valley, just "
                     "a few kilometers to the north. The RFI Graph above shows consistent and "
                     "strong interference since 2017."
            ),
        ),
    ),
    ExampleSite(
        name="Rostov-on-Don, Russia",
        lon=39.783387,
        lat=47.354445,
        zoom=11,
        anchor_date=date(2021, 7, 22),
        opacity=0.8,
        narrative=(
            NarrativeLabel(
                text="Rostov-On-Don has seen a significant military buildup and hosts the "
                     "headquarters of Russia's 4th Air and Air Defense Forces Command. The dot "
                     "indicates a facility that is likely the source of the RFI."
            ),
            NarrativeLabel(
                text="According to Wikimapia, this facility is operated by FEDERAL STATE "
                     "UNITARY ENTERPRISE \"ROSTOV-ON-DON RESEARCH INSTITUTE OF RADIO "
                     "COMMUNICATIONS\"",
                url="https://www.openstreetmap.org/way/106283207#map=17/47.35430/39.78441",
            ),
            NarrativeLabel(
                text="Its official registration lists it as a subsidiary of the Federal "
                     "Security Services of the Russian Federation (FSB). The RFI graph above "
                     "shows radar activity throughout June and July 2021. You can view the "
                     "facility likely causing this interference by zooming in to the blue dot "
                     "and reducing the opacity using the slider."
            ),
        ),
    ),
    ExampleSite(
        name="White Sands Missile Range, USA",
        lon=-106.3122,
        lat=31.9735,
        zoom=10,
        anchor_date=date(2021, 12, 14),
        opacity=0.8,
        narrative=(
            NarrativeLabel(
                text="The White Sands Missile Range (WSMR) is a U.S. Military base located in "
                     "New Mexico.",
                url="https://en.wikipedia.org/wiki/White_Sands_Missile_Range",
            ),
            NarrativeLabel(
                text="Patriot missiles are often tested at Launch Complex 38. The RFI graph "
                     "shows significant radar activity on December 14th, 2021, and February "
                     "23rd, 2020. Smaller signatures are also visible in April and June 2021, "
                     "as well as at various points since 2017."
            ),
        ),
    ),
)

SITE_REGISTRY = MappingProxyType({site.name: site for site in _SITES})

if len(SITE_REGISTRY) != len(_SITES):
    raise ValueError("Duplicate example site names")


def get_site(name: str) -> ExampleSite:
    """Look up a site by its display name.

    Raises
    ------
    KeyError
        If no site has that name.
    """
    try:
        return SITE_REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown example site {name!r}; choose from {site_names()}") from None


def site_names() -> list[str]:
    """Site names in dropdown order."""
    return list(SITE_REGISTRY)
