import pytest
from datetime import date

from pydantic import ValidationError

from rfi_tracker.sites import SITE_REGISTRY, Annotation, ExampleSite, get_site, site_names

pytestmark = pytest.mark.unit


def test_dropdown_order():
    assert site_names() == [
        "Dammam, Saudi Arabia",
        "Dimona Radar Facility, Israel",
        "Rostov-on-Don, Russia",
        "White Sands Missile Range, USA",
    ]


def test_white_sands():
    site = get_site("White Sands Missile Range, USA")
    assert (site.lon, site.lat, site.zoom) == (-106.3122, 31.9735, 10)
    assert site.anchor_date == date(2021, 12, 14)
    assert site.opacity == 0.8
    assert len(site.narrative) == 2


def test_dammam_annotations():
    site = get_site("Dammam, Saudi Arabia")
    colors = {a.name: a.color for a in site.annotations}

    assert colors == {"radar": "red", "power": "green", "control": "blue", "launchers": "black"}
    assert len(next(a for a in site.annotations if a.name == "launchers").polygons) == 4
    assert site.narrative[1].url.startswith("https://youtu.be/")


def test_every_site_has_narrative():
    for site in SITE_REGISTRY.values():
        assert site.narrative
        assert 0 <= site.opacity <= 1


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        SITE_REGISTRY["Atlantis"] = get_site("Dammam, Saudi Arabia")


def test_sites_are_frozen():
    with pytest.raises(ValidationError):
        get_site("Dammam, Saudi Arabia").zoom = 3


def test_unknown_site_lists_choices():
    with pytest.raises(KeyError, match="White Sands"):
        get_site("Atlantis")


def test_annotation_ring_validation():
    with pytest.raises(ValidationError, match="at least 3 vertices"):
        Annotation(name="x", color="red", polygons=(((0.0, 0.0), (1.0, 1.0)),))

    with pytest.raises(ValidationError, match="outside lon/lat"):
        Annotation(name="x", color="red", polygons=(((0.0, 0.0), (1.0, 1.0), (200.0, 1.0)),))


def test_site_requires_narrative():
    with pytest.raises(ValidationError):
        ExampleSite(name="x", lon=0, lat=0, zoom=3, anchor_date=date(2020, 1, 1),
                    opacity=0.5, narrative=())
