from gpsvario.buttons import Button, ButtonPanel


def _feed(button, levels):
    return [button.sample(level) for level in levels]


def test_press_after_high_then_three_lows():
    button = Button()
    assert _feed(button, [1, 0, 0, 0]) == [False, False, False, True]


def test_two_lows_are_not_a_press():
    button = Button()
    assert _feed(button, [1, 0, 0, 1]) == [False, False, False, False]
    assert button.pressed is False


def test_lows_from_initial_state_are_not_a_press():
    button = Button()
    _feed(button, [0, 0, 0, 0, 0])
    assert button.pressed is False


def test_press_latches_until_cleared():
    panel = ButtonPanel()
    for level in [1, 0, 0, 0, 1, 1]:
        panel.debounce(level, 1, 1, 1)
    assert panel.btn0.pressed is True
    panel.clear()
    assert panel.btn0.pressed is False


def test_holding_button_does_not_retrigger_after_clear():
    panel = ButtonPanel()
    for level in [1, 0, 0, 0]:
        panel.debounce(1, 1, level, 1)
    assert panel.btnm.pressed is True
    panel.clear()
    for _ in range(5):
        panel.debounce(1, 1, 0, 1)
    assert panel.btnm.pressed is False


def test_buttons_are_independent():
    panel = ButtonPanel()
    for level in [1, 0, 0, 0]:
        panel.debounce(1, 1, 1, level)
    assert (panel.btn0.pressed, panel.btnl.pressed,
            panel.btnm.pressed, panel.btnr.pressed) == (False, False, False, True)


def test_history_is_sixteen_bits():
    button = Button()
    _feed(button, [1] * 20)
    assert button.state == 0xFFFF


def test_clear_keeps_history():
    panel = ButtonPanel()
    for _ in range(3):
        panel.debounce(1, 0, 1, 1)
    before = panel.btnl.state
    panel.clear()
    assert panel.btnl.state == before


def test_bool_levels_accepted():
    button = Button()
    assert _feed(button, [True, False, False, False])[-1] is True
    assert button.state & 0xF == 0x8