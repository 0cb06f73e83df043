import copy
import pytest
import numpy as np
import os
import sys

# Add project root
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orbitkernel.bodies import resolve, gravitational_parameter
from orbitkernel.errors import NotFoundError, ConstantUnavailableError, StateUnavailableError
from orbitkernel.sampler import state_at
from orbitkernel.serializer import TrajectorySerializer
from orbitkernel.session import EngineSession
from orbitkernel.tools.validator import KernelValidator


PCK_TEXT = """KPL/PCK

\\begindata

BODY399_GM = ( 398600.435436 )

\\begintext
"""


@pytest.fixture
def session():
    s = EngineSession()
    yield s
    s.close()


def circular_series(n_epochs, step=600.0):
    """
    Earth at rest-ish, Moon and a spacecraft on circular orbits, in meters.
    Bodies: [399, 301, -77]
    """
    epochs = 1.0e8 + step * np.arange(n_epochs)
    t = epochs - epochs[0]
    states = np.zeros((n_epochs, 18))

    # Earth drifting in a straight line
    states[:, 0] = 1.0e11 + 30.0e3 * t
    states[:, 3] = 30.0e3

    for col, radius, period in [(6, 384.4e6, 27.3 * 86400.0), (12, 7.0e6, 5800.0)]:
        w = 2 * np.pi / period
        states[:, col + 0] = states[:, 0] + radius * np.cos(w * t)
        states[:, col + 1] = radius * np.sin(w * t)
        states[:, col + 3] = states[:, 3] - radius * w * np.sin(w * t)
        states[:, col + 4] = radius * w * np.cos(w * t)

    return states, epochs


def test_session_cannot_be_copied(session):
    with pytest.raises(TypeError):
        copy.copy(session)
    with pytest.raises(TypeError):
        copy.deepcopy(session)


def test_resolve_builtin_names(session):
    assert resolve(session, ['EARTH', 'MOON', 'SUN', '399']) == [399, 301, 10, 399]

    with pytest.raises(NotFoundError) as info:
        resolve(session, ['EARTH', 'NOT_A_REAL_BODY'])
    assert info.value.name == 'NOT_A_REAL_BODY'


def test_gm_from_text_kernel(session, tmp_path):
    pck = tmp_path / "gm.tpc"
    pck.write_text(PCK_TEXT)
    session.load(str(pck))

    assert gravitational_parameter(session, 399) == pytest.approx(3.98600435436e14)

    with pytest.raises(ConstantUnavailableError) as info:
        gravitational_parameter(session, 301)
    assert info.value.diagnostic


def test_write_and_read_back_relative(session, tmp_path):
    path = tmp_path / "relative.bsp"
    bodies = [399, 301, -77]
    states, epochs = circular_series(20)

    TrajectorySerializer(session).write(str(path), bodies, states, epochs, 399, 0.5)
    assert path.exists()

    validator = KernelValidator(session, path)
    assert validator.validate(bodies, states, epochs, 399, 0.5), validator.errors
    assert validator.max_pos_err < 1e-6


def test_write_and_read_back_absolute(session, tmp_path):
    path = tmp_path / "absolute.bsp"
    states, epochs = circular_series(12)
    # Drop Earth from the body list: segments hold the raw states
    states = states[:, 6:]

    TrajectorySerializer(session).write(str(path), [301, -77], states, epochs, 399, 1.0)

    session.load(str(path))
    s = state_at(session, 301, 399, epochs[3])
    np.testing.assert_allclose(s, states[3, :6] / 1000.0, rtol=1e-12, atol=1e-9)

    with pytest.raises(StateUnavailableError):
        state_at(session, 301, 399, epochs[-1] + 86400.0)
