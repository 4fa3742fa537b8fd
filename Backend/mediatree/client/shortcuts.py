from mediatree.client.controller import PlaybackController

SEEK_STEP = 10.0

# key -> (controller method, args)
KEYMAP = {
    " ": ("toggle_play", ()),
    "k": ("toggle_play", ()),
    "j": ("seek_by", (-SEEK_STEP,)),
    "ArrowLeft": ("seek_by", (-SEEK_STEP,)),
    "l": ("seek_by", (SEEK_STEP,)),
    "ArrowRight": ("seek_by", (SEEK_STEP,)),
    "m": ("toggle_mute", ()),
    "f": ("toggle_fullscreen", ()),
}


def handle_key(controller: PlaybackController, key: str) -> bool:
    """
    Apply a player keyboard shortcut. Returns False for keys that are not
    shortcuts, so the caller can let them through.
    """
    if controller.state.path is None:
        return False

    if key == "Escape":
        if controller.state.is_fullscreen:
            controller.exit_fullscreen()
        else:
            controller.close()
        return True

    binding = KEYMAP.get(key) or KEYMAP.get(key.lower())
    if binding is None:
        return False
    method, args = binding
    getattr(controller, method)(*args)
    return True
