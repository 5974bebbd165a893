from dataclasses import replace

import pytest
from PIL import Image

from ndsbanner.animation import AnimationPlayer
from ndsbanner.banner import Banner, BannerError, BannerVersion


def make_banner(durations, flip_h=False, flip_v=False):
    banner = Banner()
    banner.set_version(BannerVersion.DSI)
    banner.extra_ncg[0] = bytes(range(256)) * 2
    banner.extra_ncl[0] = [(i * 0x421) & 0x7FFF for i in range(16)]
    for duration in durations:
        index = banner.add_frame()
        banner.frames[index] = replace(
            banner.frames[index], duration=duration, flip_h=flip_h, flip_v=flip_v
        )
    return banner


def test_no_frames_raises():
    with pytest.raises(BannerError):
        AnimationPlayer(Banner())


def test_render_counts_frames_and_ticks():
    durations = [2, 3, 4]
    player = AnimationPlayer(make_banner(durations))
    images = player.render()
    assert len(images) == len(durations)
    assert player.frame_count == len(durations)
    assert player.tick_count == sum(durations) + 1


def test_render_unflipped_matches_export():
    banner = make_banner([1])
    player = AnimationPlayer(banner)
    image = player.render()[0]
    assert image.tobytes() == banner.export_icon(0, 0).tobytes()


def test_render_applies_horizontal_flip():
    banner = make_banner([1], flip_h=True)
    image = AnimationPlayer(banner).render()[0]
    expected = banner.export_icon(0, 0).transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    assert image.tobytes() == expected.tobytes()


def test_render_applies_vertical_flip():
    banner = make_banner([1], flip_v=True)
    image = AnimationPlayer(banner).render()[0]
    expected = banner.export_icon(0, 0).transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    assert image.tobytes() == expected.tobytes()


def test_playback_lasts_total_duration():
    durations = [2, 3]
    player = AnimationPlayer(make_banner(durations))
    player.play()
    results = [player.tick() for _ in range(sum(durations) + 1)]
    assert results == [True] * sum(durations) + [False]
    assert player.playing is False


def test_playback_reaches_last_frame():
    durations = [2, 3]
    player = AnimationPlayer(make_banner(durations))
    player.play()
    seen = set()
    while player.tick():
        seen.add(player.current_frame)
    assert seen == {0, 1}


def test_loop_restarts_from_first_frame():
    durations = [1, 1]
    player = AnimationPlayer(make_banner(durations), loop=True)
    player.play()
    for _ in range(sum(durations) + 1):
        assert player.tick() is True
    assert player.playing is True
    assert player.current_frame == 0
    assert player.current_tick == 1


def test_tick_when_stopped_does_nothing():
    player = AnimationPlayer(make_banner([2]))
    player.play()
    player.stop()
    assert player.tick() is False
    assert player.current_tick == 0


def test_seek_sets_tick_to_preceding_durations():
    durations = [2, 3, 4]
    player = AnimationPlayer(make_banner(durations))
    image = player.seek(2)
    assert player.current_frame == 2
    assert player.current_tick == durations[0] + durations[1]
    assert image is player.current_image


def test_seek_out_of_range():
    player = AnimationPlayer(make_banner([1, 1]))
    with pytest.raises(IndexError):
        player.seek(2)


def test_status_text():
    player = AnimationPlayer(make_banner([2, 3]))
    player.seek(1)
    assert player.status() == "Frame 2 / 2 | Tick 3 / 6"