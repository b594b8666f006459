"""Tests for the playlist state machine."""

import random

import pytest

from stesse_player.domain.music.events import CurrentTrackChanged, PlaylistChanged
from stesse_player.domain.music.playlist import PlaylistController
from stesse_player.domain.music.value_objects import RepeatMode
from stesse_player.domain.shared.exceptions import NotFoundError, OutOfRangeError


@pytest.fixture
def playlist(sample_tracks):
    controller = PlaylistController(rng=random.Random(1234))
    controller.set_playlist(sample_tracks)
    return controller


def _ids(tracks) -> list[str]:
    return [t.id for t in tracks]


class TestSetPlaylist:
    """Tests for replacing the playlist."""

    def test_first_playlist_selects_first_track(self, playlist):
        assert playlist.current_index == 0
        assert playlist.current_track.id == "t1"

    def test_empty_playlist_clears_pointer(self):
        controller = PlaylistController()
        controller.set_playlist([])
        assert controller.current_index is None
        assert controller.current_track is None

    def test_current_track_survives_replacement(self, playlist, make_track):
        playlist.play_track_by_id("t3")
        playlist.set_playlist([make_track("x"), make_track("t3"), make_track("y")])
        assert playlist.current_index == 1
        assert playlist.current_track.id == "t3"

    def test_current_track_dropped_falls_back_to_start(self, playlist, make_track):
        playlist.play_track_by_id("t3")
        playlist.set_playlist([make_track("x"), make_track("y")])
        assert playlist.current_index == 0
        assert playlist.current_track.id == "x"

    def test_duplicate_ids_keep_first(self, make_track):
        controller = PlaylistController()
        first = make_track("a", title="First")
        controller.set_playlist([first, make_track("b"), make_track("a", title="Second")])
        assert _ids(controller.tracks) == ["a", "b"]
        assert controller.tracks[0].title == "First"

    def test_track_change_event_published(self, sample_tracks):
        controller = PlaylistController()
        received: list[CurrentTrackChanged] = []
        controller.events.subscribe(CurrentTrackChanged, received.append)
        controller.set_playlist(sample_tracks)
        assert len(received) == 1
        assert received[0].previous_track_id is None
        assert received[0].track.id == "t1"

    def test_same_current_track_publishes_no_track_change(self, playlist, sample_tracks):
        received: list[CurrentTrackChanged] = []
        playlist.events.subscribe(CurrentTrackChanged, received.append)
        playlist.set_playlist(sample_tracks)
        assert received == []


class TestSequentialNavigation:
    """Tests for next/previous without shuffle."""

    def test_next_advances(self, playlist):
        assert playlist.play_next() == 1
        assert playlist.current_track.id == "t2"

    def test_next_at_end_without_repeat_stays(self, playlist):
        playlist.play_track_at_index(4)
        assert playlist.play_next() == 4
        assert playlist.current_track.id == "t5"

    def test_previous_at_start_without_repeat_stays(self, playlist):
        assert playlist.play_previous() == 0

    def test_next_at_end_with_repeat_all_wraps(self, playlist):
        playlist.set_repeat_mode(RepeatMode.ALL)
        playlist.play_track_at_index(4)
        assert playlist.play_next() == 0

    def test_previous_at_start_with_repeat_all_wraps(self, playlist):
        playlist.set_repeat_mode(RepeatMode.ALL)
        assert playlist.play_previous() == 4

    def test_repeat_one_keeps_index(self, playlist):
        playlist.set_repeat_mode(RepeatMode.ONE)
        playlist.play_track_at_index(2)
        assert playlist.play_next() == 2
        assert playlist.play_previous() == 2

    def test_next_then_previous_restores_index(self, playlist):
        playlist.play_track_at_index(2)
        playlist.play_next()
        playlist.play_previous()
        assert playlist.current_index == 2

    def test_navigation_on_empty_playlist_is_noop(self):
        controller = PlaylistController()
        assert controller.play_next() is None
        assert controller.play_previous() is None


class TestDirectSelection:
    """Tests for jumping to a track by index or id."""

    def test_play_by_index(self, playlist):
        track = playlist.play_track_at_index(3)
        assert track.id == "t4"
        assert playlist.current_index == 3

    def test_out_of_range_mutates_nothing(self, playlist):
        playlist.play_track_at_index(1)
        received: list[PlaylistChanged] = []
        playlist.events.subscribe(PlaylistChanged, received.append)

        with pytest.raises(OutOfRangeError):
            playlist.play_track_at_index(5)
        with pytest.raises(OutOfRangeError):
            playlist.play_track_at_index(-1)

        assert playlist.current_index == 1
        assert received == []

    def test_play_by_id(self, playlist):
        track = playlist.play_track_by_id("t5")
        assert track.id == "t5"
        assert playlist.current_index == 4

    def test_unknown_id_mutates_nothing(self, playlist):
        playlist.play_track_at_index(2)
        with pytest.raises(NotFoundError):
            playlist.play_track_by_id("missing")
        assert playlist.current_index == 2

    def test_selecting_current_track_publishes_nothing(self, playlist):
        received: list[CurrentTrackChanged] = []
        playlist.events.subscribe(CurrentTrackChanged, received.append)
        playlist.play_track_at_index(0)
        assert received == []


class TestShuffle:
    """Tests for shuffle order."""

    def test_shuffle_order_is_permutation_starting_at_current(self, playlist):
        playlist.play_track_at_index(2)
        assert playlist.toggle_shuffle() is True

        order = playlist.state.shuffle_order
        assert sorted(order) == [0, 1, 2, 3, 4]
        assert order[0] == 2

    def test_toggle_on_then_off_keeps_current_track(self, playlist):
        playlist.play_track_at_index(3)
        playlist.toggle_shuffle()
        playlist.toggle_shuffle()
        assert playlist.is_shuffled is False
        assert playlist.state.shuffle_order is None
        assert playlist.current_track.id == "t4"

    def test_shuffled_pass_visits_every_track_once(self, playlist):
        playlist.toggle_shuffle()
        seen = [playlist.current_track.id]
        for _ in range(4):
            playlist.play_next()
            seen.append(playlist.current_track.id)
        assert sorted(seen) == ["t1", "t2", "t3", "t4", "t5"]

    def test_shuffled_end_without_repeat_stays(self, playlist):
        playlist.toggle_shuffle()
        for _ in range(10):
            playlist.play_next()
        last = playlist.state.shuffle_order[-1]
        assert playlist.current_index == last

    def test_shuffled_next_then_previous_restores_index(self, playlist):
        playlist.toggle_shuffle()
        playlist.play_next()
        playlist.play_next()
        index = playlist.current_index
        playlist.play_next()
        playlist.play_previous()
        assert playlist.current_index == index

    def test_set_playlist_rebuilds_shuffle_order(self, playlist, make_track):
        playlist.toggle_shuffle()
        playlist.set_playlist([make_track("a"), make_track("b")])
        assert sorted(playlist.state.shuffle_order) == [0, 1]


class TestRepeatAndSearch:
    """Tests for repeat cycling and the search view."""

    def test_repeat_cycles_off_all_one_off(self, playlist):
        assert playlist.repeat_mode == RepeatMode.OFF
        assert playlist.toggle_repeat() == RepeatMode.ALL
        assert playlist.toggle_repeat() == RepeatMode.ONE
        assert playlist.toggle_repeat() == RepeatMode.OFF

    def test_search_filters_visible_tracks_only(self, playlist, make_track):
        playlist.set_playlist(
            [
                make_track("a", title="Rainy Day Focus"),
                make_track("b", title="Sunny", artist="Rain Maker"),
                make_track("c", title="Other"),
            ]
        )
        playlist.update_search_query("RAIN")
        assert _ids(playlist.visible_tracks) == ["a", "b"]
        assert len(playlist.tracks) == 3

    def test_search_does_not_move_pointer(self, playlist):
        playlist.play_track_at_index(4)
        playlist.update_search_query("t1")
        assert playlist.current_index == 4

    def test_clear_search_shows_everything(self, playlist):
        playlist.update_search_query("nothing matches this")
        assert playlist.visible_tracks == ()
        playlist.clear_search()
        assert len(playlist.visible_tracks) == 5
