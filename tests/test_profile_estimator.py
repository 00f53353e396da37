from conftest import make_artists

from recomenfy.profile_estimator import (
    GENRE_KEYWORDS,
    estimate_profile,
    extract_top_genres,
    lookup_genre,
    mood_from_features,
)


def test_no_genre_tags_gives_neutral_chill_profile():
    for artists in ([], make_artists(3, []), [{"id": "x", "genres": None}]):
        p = estimate_profile(artists)
        assert (p.energy_avg, p.valence_avg, p.danceability_avg) == (0.5, 0.5, 0.5)
        assert p.mood_tendency == "chill"
        assert p.top_genres == []
        assert p.discovery_tolerance == "medium"


def test_all_metal_is_intense():
    p = estimate_profile(make_artists(4, ["metal"]))
    assert (p.energy_avg, p.valence_avg, p.danceability_avg) == (0.95, 0.3, 0.3)
    assert p.mood_tendency == "intense/aggressive"


def test_all_pop_is_excited():
    p = estimate_profile(make_artists(20, ["pop"]))
    assert (p.energy_avg, p.valence_avg, p.danceability_avg) == (0.8, 0.8, 0.8)
    assert p.mood_tendency == "excited/extroverted"
    assert p.top_genres == ["pop"]
    assert p.top_artist_ids == [f"a{i}" for i in range(20)]


def test_first_keyword_in_table_order_wins():
    # "indie pop" hits pop before indie; "trap" hits rap
    assert lookup_genre("indie pop") == dict(GENRE_KEYWORDS)["pop"]
    assert lookup_genre("Trap") == dict(GENRE_KEYWORDS)["rap"]
    assert lookup_genre("vaporwave") == (0.5, 0.5, 0.5)


def test_every_tag_counts_including_duplicates():
    # pop twice + classical once: energy (0.8 + 0.8 + 0.2) / 3 = 0.6
    p = estimate_profile([{"id": "a", "genres": ["pop", "pop"]}, {"id": "b", "genres": ["classical"]}])
    assert p.energy_avg == 0.6
    assert p.valence_avg == 0.7
    assert p.danceability_avg == 0.57
    assert p.mood_tendency == "energetic"


def test_unmatched_tags_pull_towards_neutral():
    p = estimate_profile([{"id": "a", "genres": ["metal", "shoegaze"]}])
    assert 0.72 <= p.energy_avg <= 0.73
    assert p.valence_avg == 0.4
    assert p.danceability_avg == 0.4


def test_top_genres_ordered_by_count_with_first_seen_ties():
    artists = [
        {"genres": ["b", "a"]},
        {"genres": ["c", "a"]},
        {"genres": ["d", "e", "f", "c"]},
    ]
    top = extract_top_genres(artists)
    assert top == ["a", "c", "b", "d", "e"]
    assert len(estimate_profile(artists).top_genres) == 5


def test_top_genres_are_case_sensitive():
    assert extract_top_genres([{"genres": ["Pop", "pop", "pop"]}]) == ["pop", "Pop"]


def test_mood_rules_in_order():
    assert mood_from_features(0.8, 0.7) == "excited/extroverted"
    assert mood_from_features(0.8, 0.3) == "intense/aggressive"
    assert mood_from_features(0.3, 0.7) == "relaxed/peaceful"
    assert mood_from_features(0.3, 0.3) == "melancholic/sad"
    assert mood_from_features(0.8, 0.5) == "energetic"
    assert mood_from_features(0.5, 0.5) == "chill"
    assert mood_from_features(0.3, 0.5) == "chill"
