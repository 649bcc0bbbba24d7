"""
Needle EMG reference values per muscle.

MUP duration in ms, amplitude in µV, polyphasia as % of sampled MUPs.
"""


def _muscle(muscle_id, name, nerve, root, duration=(5, 15), amplitude=(200, 2000), polyphasia=(0, 20)):
    return {
        "id": muscle_id,
        "name": name,
        "nerve": nerve,
        "root": root,
        "duration": {"min": duration[0], "max": duration[1]},
        "amplitude": {"min": amplitude[0], "max": amplitude[1]},
        "polyphasia": {"min": polyphasia[0], "max": polyphasia[1]},
    }


MUSCLE_REFERENCES = [
    # Upper limb
    _muscle("deltoid", "Deltoid", "axillary", "C5-C6", duration=(8, 14)),
    _muscle("biceps_brachii", "Biceps Brachii", "musculocutaneous", "C5-C6", duration=(7, 13)),
    _muscle("triceps_brachii", "Triceps Brachii", "radial", "C6-C7-C8", duration=(8, 14)),
    _muscle("flexor_carpi_radialis", "Flexor Carpi Radialis", "median", "C6-C7"),
    _muscle("abductor_pollicis_brevis", "Abductor Pollicis Brevis", "median_motor", "C8-T1"),
    _muscle("first_dorsal_interosseous", "First Dorsal Interosseous", "ulnar_motor", "C8-T1"),
    # Lower limb
    _muscle("iliopsoas", "Iliopsoas", "femoral", "L2-L3", duration=(8, 15)),
    _muscle("quadriceps", "Quadriceps", "femoral", "L2-L4", duration=(8, 15)),
    _muscle("hamstrings", "Hamstrings", "sciatic", "L5-S1", duration=(8, 15)),
    _muscle("tibialis_anterior", "Tibialis Anterior", "peroneal", "L4-L5"),
    _muscle("peroneus_longus", "Peroneus Longus", "peroneal", "L5-S1"),
    _muscle("gastrocnemius", "Gastrocnemius", "tibial", "S1-S2"),
    _muscle("soleus", "Soleus", "tibial", "S1-S2"),
    _muscle("abductor_hallucis", "Abductor Hallucis", "tibial_motor", "S1-S2"),
    _muscle("extensor_digitorum_brevis", "Extensor Digitorum Brevis", "peroneal", "L5-S1"),
]

# Used for muscles outside the table
DEFAULT_MUP_RANGES = {
    "duration": {"min": 5, "max": 15},
    "amplitude": {"min": 200, "max": 2000},
}
