# tests/unit/test_scorer.py
from __future__ import annotations

import pytest

from src.core.errors import InputValidationError
from src.core.scoring import (
    bedroom_points,
    borough_fit,
    borough_points,
    budget_points,
    pets_amenities_points,
    rank_analyses,
    score_listing,
)
from src.schemas.labels import AdvantageTag, Badge, Recommendation, RiskTag, badge_for
from tests import make_criteria, make_listing


def test_baseline_listing_is_act_now():
    # 40 budget + 20 bedrooms + 20 borough + 10 pets/amenities (no pets needed) + 0 incentives
    a = score_listing(make_listing(price=2800), make_criteria(budget_max=3500))

    assert a.score == 90
    assert a.badge == Badge.ACT_NOW
    assert a.recommendation == Recommendation.apply
    assert a.risks == []
    assert a.advantages == [
        AdvantageTag.below_budget,
        AdvantageTag.well_below_budget,
        AdvantageTag.preferred_borough,
        AdvantageTag.exact_bedrooms,
        AdvantageTag.high_score,
    ]
    c = a.components
    assert (c.budget, c.bedrooms, c.borough, c.pets_amenities, c.incentives) == (40, 20, 20, 10, 0)
    assert c.raw_total == 90
    assert c.photo_capped is False


def test_budget_component_at_ninety_percent():
    # 2800 <= 0.9 * 3500 = 3150
    assert budget_points(2800, 3500) == 40


@pytest.mark.parametrize(
    "price,expected",
    [
        (3150, 40),  # exactly 90%
        (3151, 30),
        (3500, 30),  # exactly at budget
        (3850, 15),  # exactly 110%
        (3851, 0),
        (9000, 0),
    ],
)
def test_budget_tier_boundaries(price, expected):
    assert budget_points(price, 3500) == expected


def test_three_plus_with_two_bedrooms_is_off_by_one():
    crit = make_criteria(bedrooms="3+")
    assert bedroom_points(make_listing(bedrooms=2), crit) == 10
    assert bedroom_points(make_listing(bedrooms=3), crit) == 20
    assert bedroom_points(make_listing(bedrooms=5), crit) == 20
    assert bedroom_points(make_listing(bedrooms=1), crit) == 0


def test_studio_and_wrong_bedrooms():
    assert bedroom_points(make_listing(bedrooms=0), make_criteria(bedrooms="0")) == 20

    a = score_listing(make_listing(bedrooms=3), make_criteria(bedrooms="1"))
    assert a.components.bedrooms == 0
    assert RiskTag.wrong_bedrooms in a.risks
    assert AdvantageTag.exact_bedrooms not in a.advantages


def test_two_incentives_earn_the_multiple_bonus():
    listing = make_listing(description="First month free, no broker fee")
    a = score_listing(listing, make_criteria())

    assert a.incentives_detected == ["free month", "no fee"]
    assert a.components.incentives == 10
    assert AdvantageTag.free_month in a.advantages
    assert AdvantageTag.no_fee in a.advantages
    # 90 + 10 hits the ceiling exactly
    assert a.score == 100


def test_missing_photo_caps_score_at_59():
    listing = make_listing(
        image_url=None,
        description="First month free on a 13-month lease, two blocks from the G train.",
    )
    a = score_listing(listing, make_criteria())

    assert a.components.raw_total == 96
    assert a.score == 59
    assert a.badge == Badge.WAIT
    assert a.recommendation == Recommendation.wait_consciously
    assert a.components.photo_capped is True
    assert RiskTag.no_photo in a.risks


def test_missing_apply_link_is_capped_too():
    a = score_listing(make_listing(apply_url=None), make_criteria())
    assert a.components.raw_total == 90
    assert a.score == 59
    assert a.components.photo_capped is True
    assert RiskTag.no_photo not in a.risks


def test_missing_photo_below_cap_is_not_flagged_capped():
    listing = make_listing(image_url=None, price=3600, borough="Queens", neighborhood="Astoria")
    a = score_listing(listing, make_criteria())
    # 15 budget + 20 bedrooms + 5 other borough + 10 pets
    assert a.score == 50
    assert a.components.photo_capped is False


def test_every_risk_fires_in_canonical_order():
    listing = make_listing(
        price=4000,
        bedrooms=3,
        image_url=None,
        pets_allowed=False,
        description=None,
    )
    crit = make_criteria(boroughs=["Manhattan"], pets="dogs", budget_max=3500)
    a = score_listing(listing, crit)

    assert a.score == 5
    assert a.badge == Badge.PASS
    assert a.recommendation == Recommendation.wait
    assert a.risks == list(RiskTag)
    assert a.advantages == []


class TestBorough:
    def test_other_nyc_borough(self):
        crit = make_criteria(boroughs=["Manhattan"])
        listing = make_listing()
        assert borough_fit(listing, crit) == "other_nyc"
        assert borough_points("other_nyc") == 5

    def test_outside_nyc(self):
        crit = make_criteria(boroughs=["Manhattan"])
        listing = make_listing(borough="Jersey City", neighborhood="Journal Square")
        assert borough_fit(listing, crit) == "outside_nyc"
        a = score_listing(listing, crit)
        assert a.components.borough == 0
        assert RiskTag.wrong_borough in a.risks

    def test_no_preference_gets_full_points_without_tag(self):
        a = score_listing(make_listing(), make_criteria(boroughs=[]))
        assert a.components.borough == 20
        assert AdvantageTag.preferred_borough not in a.advantages
        assert RiskTag.wrong_borough not in a.risks

    def test_neighborhood_preference_matches_but_is_not_a_borough_advantage(self):
        a = score_listing(make_listing(), make_criteria(boroughs=["Bushwick"]))
        assert a.components.borough == 20
        assert AdvantageTag.preferred_borough not in a.advantages


class TestPetsAndAmenities:
    def test_pets_welcome(self):
        a = score_listing(make_listing(pets_allowed=True), make_criteria(pets="cats"))
        assert a.components.pets_amenities == 10
        assert AdvantageTag.pets_ok in a.advantages

    def test_pets_refused(self):
        a = score_listing(make_listing(pets_allowed=False), make_criteria(pets="cats"))
        assert a.components.pets_amenities == 0
        assert RiskTag.no_pets in a.risks

    def test_unknown_policy_counts_as_risk(self):
        a = score_listing(make_listing(pets_allowed=None), make_criteria(pets="both"))
        assert RiskTag.no_pets in a.risks
        assert "pet policy unconfirmed" in a.reasoning

    def test_amenity_matches_add_two_points_each(self):
        listing = make_listing(
            pets_allowed=None,
            amenities=["Washer/Dryer"],
            description="Renovated unit with a fitness center in the building and a roomy kitchen.",
        )
        crit = make_criteria(pets="dogs", amenities=["washer_dryer", "gym", "doorman"])
        assert pets_amenities_points(listing, crit, ["washer_dryer", "gym"]) == 4
        assert score_listing(listing, crit).components.pets_amenities == 4

    def test_category_is_capped_at_ten(self):
        listing = make_listing(amenities=["gym", "elevator"])
        crit = make_criteria(amenities=["gym", "elevator"])
        assert score_listing(listing, crit).components.pets_amenities == 10


@pytest.mark.parametrize(
    "listing_kwargs,criteria_kwargs",
    [
        ({}, {"budget_max": 0}),
        ({}, {"budget_max": -100}),
        ({"price": 0}, {}),
        ({"price": -5}, {}),
        ({"bedrooms": -1}, {}),
        ({"status": "Rented"}, {}),
    ],
)
def test_malformed_inputs_are_rejected(listing_kwargs, criteria_kwargs):
    with pytest.raises(InputValidationError):
        score_listing(make_listing(**listing_kwargs), make_criteria(**criteria_kwargs))


def test_scoring_is_deterministic():
    listing = make_listing(description="Two months free and no fee! Elevator building.", pets_allowed=True)
    crit = make_criteria(pets="cats", amenities=["elevator"])
    assert score_listing(listing, crit) == score_listing(listing, crit)


@pytest.mark.parametrize(
    "score,badge",
    [
        (100, Badge.ACT_NOW),
        (80, Badge.ACT_NOW),
        (79, Badge.CONSIDER),
        (60, Badge.CONSIDER),
        (59, Badge.WAIT),
        (40, Badge.WAIT),
        (39, Badge.PASS),
        (0, Badge.PASS),
    ],
)
def test_badge_band_edges(score, badge):
    assert badge_for(score)[0] == badge


def test_every_score_maps_to_exactly_one_band():
    seen = {badge_for(s)[0] for s in range(0, 101)}
    assert seen == set(Badge)


def test_rank_analyses_orders_by_score_then_advantages():
    crit = make_criteria()
    best = score_listing(make_listing(id="A", description="First month free, no broker fee"), crit)
    mid = score_listing(make_listing(id="B"), crit)
    low = score_listing(make_listing(id="C", price=3600), crit)
    tie = score_listing(make_listing(id="D"), crit)

    ranked = rank_analyses([low, mid, tie, best])
    assert [a.listing_id for a in ranked] == ["A", "B", "D", "C"]
