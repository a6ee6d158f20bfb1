"""
Directions Resolver Tests

Covers destination matching (full name, sub-token, alias), the listing
fallback for generic directions questions, transit and safety sections and
the empty result for unknown locations.
"""

import json

import pytest

from aura_server.geo import DirectionsResolver, GeoResolver, ReferenceData, is_directions_query


@pytest.fixture
def custom_directions(tmp_path):
    communities = {
        "communities": [{"community_name": "North", "buildings": ["Elm Hall"]}],
        "buildings": [{"name": "Elm Hall", "latitude": 1.0, "longitude": 1.0}],
    }
    directions = {
        "aliases": {},
        "safety_tips": [],
        "communities": {
            "North": [
                {"name": "Stadium", "distance_miles": 0.2, "walk_minutes": 5,
                 "route": "Walk south.", "transit": "Take the Stadium shuttle."},
            ],
        },
    }
    (tmp_path / "communities.json").write_text(json.dumps(communities), encoding="utf-8")
    (tmp_path / "directions.json").write_text(json.dumps(directions), encoding="utf-8")
    reference = ReferenceData.load(str(tmp_path))
    return DirectionsResolver(reference, GeoResolver(reference))


class TestDestinationMatching:
    def test_rec_center_from_creswell(self, directions):
        result = directions.resolve("How do I get to the rec center from Creswell Hall?", "Creswell Hall")

        assert result.destination == "Ramsey Student Center"
        assert "Directions from Creswell Hall to Ramsey Student Center:" in result.text
        assert "Distance: 0.3 miles" in result.text
        assert "Estimated walking time: about 7 minutes" in result.text
        assert "Route: " in result.text
        assert "Landmarks: Baxter Street crosswalk, Hull Street parking deck" in result.text
        assert "Transit:" not in result.text
        assert result.sources == ["Campus Directions (Creswell Community)"]

    def test_full_name(self, directions):
        result = directions.resolve("Where is the Tate Student Center?", "Creswell Hall")
        assert result.destination == "Tate Student Center"

    def test_long_walk_includes_transit(self, directions):
        result = directions.resolve("Where is the Tate Student Center?", "Creswell Hall")
        assert "Transit: Take the East-West or Orbit bus" in result.text

    def test_meaningful_sub_token(self, directions):
        result = directions.resolve("how far is the library", "Boggs Hall")
        assert result.destination == "Main Library"
        assert "about 8 minutes" in result.text
        assert result.sources == ["Campus Directions (Hill Community)"]

    def test_most_tokens_wins(self, directions):
        result = directions.resolve("the library by main street or the health office", "Creswell Hall")
        assert result.destination == "Main Library"

    def test_alias_requires_whole_words(self, directions):
        result = directions.resolve("what do I do with the recycling bins", "Creswell Hall")
        assert result.destination is None
        assert result.text == ""

    def test_alias(self, directions):
        result = directions.resolve("Is the gym far?", "Myers Hall")
        assert result.destination == "Ramsey Student Center"


class TestSections:
    def test_safety_tips_on_night_question(self, directions):
        result = directions.resolve("Is it safe to walk to Bolton at night?", "Creswell Hall")

        assert result.destination == "Bolton Dining Commons"
        assert "Safety tips:" in result.text
        assert "- Request a free UGA Police safety escort at 706-542-2200." in result.text

    def test_no_safety_tips_by_default(self, directions):
        result = directions.resolve("How do I get to Bolton?", "Creswell Hall")
        assert "Safety tips:" not in result.text

    def test_transit_keyword_on_short_walk(self, custom_directions):
        with_bus = custom_directions.resolve("Is there a shuttle to the stadium?", "Elm Hall")
        without = custom_directions.resolve("How do I get to the stadium?", "Elm Hall")

        assert "Transit: Take the Stadium shuttle." in with_bus.text
        assert "Transit:" not in without.text


class TestListingAndEmpty:
    def test_listing_for_unmatched_directions_question(self, directions):
        result = directions.resolve("Where's the nearest place to eat?", "Creswell Hall")

        lines = result.text.split("\n")
        assert lines[0] == "Known destinations from Creswell Hall (Creswell Community):"
        assert lines[1] == "- Ramsey Student Center: 0.3 miles, about 7 minutes walking"
        assert len(lines) == 7
        assert result.destination is None
        assert result.sources == ["Campus Directions (Creswell Community)"]

    def test_non_navigation_question_adds_nothing(self, directions):
        result = directions.resolve("Is there a way to request a room change?", "Creswell Hall")
        assert result.text == ""
        assert result.sources == []

    def test_unrelated_question(self, directions):
        result = directions.resolve("What are quiet hours?", "Creswell Hall")
        assert result.text == ""
        assert result.sources == []

    @pytest.mark.parametrize("location", [None, "", "   ", "Hogwarts"])
    def test_unknown_location(self, directions, location):
        result = directions.resolve("How do I get to the rec center?", location)
        assert result.text == ""
        assert result.sources == []

    def test_community_without_table(self, tmp_path):
        communities = {"communities": [{"community_name": "North", "buildings": ["Elm Hall"]}]}
        (tmp_path / "communities.json").write_text(json.dumps(communities), encoding="utf-8")
        reference = ReferenceData.load(str(tmp_path))

        result = DirectionsResolver(reference, GeoResolver(reference)).resolve("where is the gym", "Elm Hall")

        assert result.text == ""


class TestIsDirectionsQuery:
    @pytest.mark.parametrize(
        "query",
        ["How do I get to Tate?", "directions to the library", "How far is the MLC", "closest dining hall", "walk to Bolton"],
    )
    def test_detected(self, query):
        assert is_directions_query(query)

    @pytest.mark.parametrize(
        "query",
        [
            "What are quiet hours?",
            "Don't forget to sign in guests",
            "Can I have a microwave?",
            "Is there a way to request a room change?",
            "Where is the room change form?",
            "Where's my package?",
            "I need to get to class on time",
        ],
    )
    def test_not_detected(self, query):
        assert not is_directions_query(query)
