"""Debouncing of push buttons sampled at a regular interval.

Buttons are active low.  A press is recognised when one high sample is
followed by three low samples; the pressed flag then stays set until it is
cleared.
"""

from __future__ import annotations

from dataclasses import dataclass, field

_HISTORY_MASK = 0xFFFF
_PRESS_MASK = 0xFFF0
_PRESS_PATTERN = 0xFFF8


@dataclass
class Button:
    """Sample history and latched press flag of one button."""

    state: int = 0
    pressed: bool = False

    def sample(self, level) -> bool:
        """Add a sample (true for high, released) and return the pressed flag."""
        self.state = ((self.state << 1) | (1 if level else 0)) & _HISTORY_MASK
        if (self.state | _PRESS_MASK) == _PRESS_PATTERN:
            self.pressed = True
        return self.pressed


@dataclass
class ButtonPanel:
    """The four buttons of the instrument: 0, left, middle and right."""

    btn0: Button = field(default_factory=Button)
    btnl: Button = field(default_factory=Button)
    btnm: Button = field(default_factory=Button)
    btnr: Button = field(default_factory=Button)

    def clear(self) -> None:
        """Forget any latched presses; sample histories are kept."""
        for button in (self.btn0, self.btnl, self.btnm, self.btnr):
            button.pressed = False

    def debounce(self, btn0, btnl, btnm, btnr) -> None:
        """Add one sample of each button's level."""
        self.btn0.sample(btn0)
        self.btnl.sample(btnl)
        self.btnm.sample(btnm)
        self.btnr.sample(btnr)