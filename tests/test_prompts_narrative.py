from prompts.narrative import SYSTEM_INSTRUCTION, build_taste_prompt, format_track
from spotify_client import Artist, Track


def test_build_taste_prompt_lists_artists_and_tracks_in_order():
    artists = [Artist(id="1", name="Phoebe Bridgers"), Artist(id="2", name="Mitski")]
    tracks = [
        Track(id="t1", name="Motion Sickness", artist_names=("Phoebe Bridgers",)),
        Track(id="t2", name="Nobody", artist_names=("Mitski", "Feature")),
    ]

    prompt = build_taste_prompt(artists, tracks)

    assert prompt == (
        "User's top artists are Phoebe Bridgers, Mitski and top tracks are "
        "Motion Sickness-Phoebe Bridgers, Nobody-Mitski."
    )


def test_format_track_without_artists_keeps_trailing_separator():
    assert format_track(Track(id="t", name="Untitled")) == "Untitled-"


def test_system_instruction_asks_for_blank_line_paragraphs():
    assert "blank line" in SYSTEM_INSTRUCTION
    assert "Plain text only" in SYSTEM_INSTRUCTION
