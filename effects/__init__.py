# effects/__init__.py
"""
The concrete particle systems and the screens that compose them.

A screen is an ordered list of system classes, drawn back to front.
build_screen() instantiates one with per-system overrides from config.json
and gives every system its own random stream derived from a single seed,
so systems never share generator state.
"""
import logging
from typing import Any, Dict, List, Optional, Type

import numpy as np

from simulation import ParticleSystem, Simulation

from .atomic import HexAtomicSystem
from .celebration import BubbleSystem, ConfettiSystem, SparkleSystem
from .daynight import DayNightSystem
from .fireflies import FirefliesSystem
from .fireworks import Fireworks2026System, FireworkSystem
from .heavenly import HeavenlySystem
from .leaves import LeafSystem, TreeSystem
from .petals import SakuraSystem
from .premium import PremiumOrbSystem
from .snowfall import OrnamentSystem, SnowfallSystem
from .summer import SummerSystem
from .underwater import UnderwaterSystem
from .universe import UniverseSystem

SYSTEMS: Dict[str, Type[ParticleSystem]] = {
    cls.name: cls
    for cls in (
        SnowfallSystem, OrnamentSystem,
        FireworkSystem, Fireworks2026System,
        ConfettiSystem, BubbleSystem, SparkleSystem,
        SakuraSystem, FirefliesSystem,
        TreeSystem, LeafSystem,
        UniverseSystem, HexAtomicSystem, HeavenlySystem,
        UnderwaterSystem, PremiumOrbSystem,
        SummerSystem, DayNightSystem,
    )
}

SCREENS: Dict[str, List[Type[ParticleSystem]]] = {
    'christmas': [SnowfallSystem, OrnamentSystem],
    'new_year': [SparkleSystem, FireworkSystem, ConfettiSystem, BubbleSystem],
    'fireworks_2026': [Fireworks2026System],
    'sakura': [SakuraSystem],
    'fireflies': [FirefliesSystem],
    'growing_plant': [TreeSystem, LeafSystem],
    'universe': [UniverseSystem],
    'atomic': [HexAtomicSystem],
    'heavenly': [HeavenlySystem],
    'underwater': [UnderwaterSystem],
    'premium': [PremiumOrbSystem],
    'summer': [SummerSystem],
    'day_night': [DayNightSystem],
}


def screen_names() -> List[str]:
    return list(SCREENS)


def build_systems(screen: str, overrides: Optional[Dict[str, Dict[str, Any]]] = None,
                  seed: Optional[int] = None) -> List[ParticleSystem]:
    """
    Instantiates the systems of a screen, in draw order.

    Args:
        screen (str): Key of SCREENS.
        overrides (Optional[Dict[str, Dict[str, Any]]]): Parameter overrides
            keyed by system name. Entries for systems not on this screen are
            ignored.
        seed (Optional[int]): Root seed. None draws fresh OS entropy.

    Returns:
        List[ParticleSystem]: One instance per system class of the screen.
    """
    if screen not in SCREENS:
        msg = f"Unknown screen '{screen}'. Available screens: {screen_names()}."
        logging.error(msg)
        raise ValueError(msg)

    overrides = overrides or {}
    unknown = sorted(set(overrides) - set(SYSTEMS))
    if unknown:
        msg = f"Configuration error: overrides for unknown system(s) {unknown}. Known systems: {sorted(SYSTEMS)}."
        logging.critical(msg)
        raise ValueError(msg)

    classes = SCREENS[screen]
    streams = np.random.SeedSequence(seed).spawn(len(classes))
    return [
        cls(overrides.get(cls.name), rng=np.random.default_rng(stream))
        for cls, stream in zip(classes, streams)
    ]


def build_screen(screen: str, overrides: Optional[Dict[str, Dict[str, Any]]] = None,
                 seed: Optional[int] = None, log_throttle: int = 300) -> Simulation:
    """Builds a ready-to-start Simulation for the named screen."""
    systems = build_systems(screen, overrides, seed)
    logging.info(f"Screen '{screen}' built with systems: {[s.name for s in systems]} (seed {seed}).")
    return Simulation(screen, systems, log_throttle=log_throttle)
