from dmsmodel.dms_format import Animation, Model, Skeleton, Transform
from dmsmodel.playback import AnimationSwitcher


def make_model(*names):
    animations = [Animation(name, 1, 1, 1.0, [Transform()]) for name in names]
    return Model(skeleton=Skeleton(animations=animations))


def test_press_within_initial_cooldown_ignored():
    model = make_model("idle", "walk")
    switcher = AnimationSwitcher()
    assert switcher.press(model, 100) is None
    assert model.current_animation() == 0


def test_press_switches_to_next_animation():
    model = make_model("idle", "walk")
    switcher = AnimationSwitcher()
    assert switcher.press(model, 500) == "walk"
    assert model.current_animation() == 1
    assert switcher.current == 1


def test_debounce_then_wrap_around():
    model = make_model("idle", "walk")
    switcher = AnimationSwitcher()
    switcher.press(model, 600)
    assert switcher.press(model, 900) is None
    assert switcher.press(model, 1100) == "idle"
    assert model.current_animation() == 0


def test_switch_rewinds_time():
    model = make_model("idle", "walk")
    model.skeleton.current_time = 0.75
    AnimationSwitcher().press(model, 1000)
    assert model.skeleton.current_time == 0.0


def test_model_without_animations_unchanged():
    model = Model()
    switcher = AnimationSwitcher()
    assert switcher.press(model, 1000) is None
    assert switcher.last_change_ms == 0
    assert switcher.current == 0


def test_single_animation_stays_selected():
    model = make_model("spin")
    switcher = AnimationSwitcher()
    assert switcher.press(model, 1000) == "spin"
    assert model.current_animation() == 0