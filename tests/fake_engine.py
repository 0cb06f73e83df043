import numpy as np

from orbitkernel.errors import EngineError


class FakeSession:
    """
    In-memory stand-in for EngineSession. Records every kernel call and
    answers lookups from plain dicts.
    """

    def __init__(self, names=None, constants=None, states=None):
        self.names = names or {}
        self.constants = constants or {}
        self.states = states or (lambda target, observer, et: None)
        self.policy_sets = 0
        self.opened = []
        self.segments = []
        self.closed = []
        self.fail_open = None
        self.fail_segment = None  # (target, diagnostic)
        self.fail_close = None

    def set_error_policy(self):
        self.policy_sets += 1

    def body_code(self, name):
        if name not in self.names:
            raise EngineError("SPICE(NOTFOUND)")
        return self.names[name]

    def body_constant(self, body, item, dim):
        key = (body, item)
        if key not in self.constants:
            raise EngineError("SPICE(KERNELVARNOTFOUND)")
        return np.atleast_1d(np.asarray(self.constants[key], dtype=float))[:dim]

    def state(self, target, observer, epoch, frame, abcorr):
        s = self.states(target, observer, epoch)
        if s is None:
            raise EngineError("SPICE(SPKINSUFFDATA)")
        return np.asarray(s, dtype=float)

    def open_kernel(self, path, internal_name, comment_chars):
        if self.fail_open:
            raise EngineError(self.fail_open)
        self.opened.append((str(path), internal_name, comment_chars))
        return len(self.opened)

    def write_segment(self, handle, target, observer, frame, t0, tfinal, label, degree, states, epochs):
        if self.fail_segment and self.fail_segment[0] == target:
            raise EngineError(self.fail_segment[1])
        self.segments.append({
            'handle': handle,
            'target': target,
            'observer': observer,
            'frame': frame,
            't0': t0,
            'tfinal': tfinal,
            'label': label,
            'degree': degree,
            'states': np.array(states, copy=True),
            'epochs': np.array(epochs, copy=True),
        })

    def close_kernel(self, handle):
        self.closed.append(handle)
        if self.fail_close:
            raise EngineError(self.fail_close)
