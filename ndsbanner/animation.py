"""Playback model for the DSi animated banner icon."""

from PIL import Image

from .banner import ICON_TILE_WIDTH, BannerError

TICK_INTERVAL_MS = 17
"""Delay between ticks during playback (roughly 60 Hz)."""


class AnimationPlayer:
    """Steps through a banner's animation sequence one tick at a time."""

    def __init__(self, banner, loop=False):
        if not banner.frame_count:
            raise BannerError("This banner has no frames yet.")
        self.banner = banner
        self.loop = loop
        self.images = []
        self.frame_count = 0
        self.tick_count = 1
        self.current_frame = 0
        self.current_tick = 0
        self.duration_delay = 0
        self.playing = False

    def __repr__(self):
        return (
            f"AnimationPlayer(frame={self.current_frame}, tick={self.current_tick}, "
            f"playing={self.playing})"
        )

    def render(self):
        """Build the image of every frame, applying its flips; returns them."""
        self.images = []
        self.frame_count = 0
        self.tick_count = 1
        for frame in self.banner.frames:
            if not frame.duration:
                break
            image = self.banner.icon(frame.bitmap, frame.palette).to_image(ICON_TILE_WIDTH)
            if frame.flip_h:
                image = image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
            if frame.flip_v:
                image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
            self.images.append(image)
            self.frame_count += 1
            self.tick_count += frame.duration
        return list(self.images)

    def _ensure_rendered(self):
        if not self.images:
            self.render()

    @property
    def current_image(self):
        """The image of the frame currently shown."""
        self._ensure_rendered()
        return self.images[self.current_frame]

    def play(self):
        """Restart playback from the first frame."""
        self._ensure_rendered()
        self.duration_delay = 0
        self.current_frame = 0
        self.current_tick = 0
        self.playing = True

    def stop(self):
        self.playing = False

    def tick(self):
        """Advance playback by one tick; returns whether it is still playing."""
        if not self.playing:
            return False
        frame = self.banner.frames[self.current_frame]
        if self.duration_delay == frame.duration:
            self.duration_delay = 0
            self.current_frame += 1
            if self.current_frame == self.frame_count:
                if self.loop:
                    self.current_frame = 0
                    self.current_tick = 0
                else:
                    self.current_frame -= 1
                    self.stop()
                    return False
        self.duration_delay += 1
        self.current_tick += 1
        return True

    def seek(self, frame):
        """Jump to frame ``frame`` (counted from 0) while stopped."""
        self._ensure_rendered()
        if not 0 <= frame < self.frame_count:
            raise IndexError(f"frame {frame} out of range")
        self.current_frame = frame
        self.current_tick = sum(f.duration for f in self.banner.frames[:frame])
        return self.images[frame]

    def status(self):
        """Progress text as shown under the player."""
        return (
            f"Frame {self.current_frame + 1} / {self.frame_count} | "
            f"Tick {self.current_tick + 1} / {self.tick_count}"
        )