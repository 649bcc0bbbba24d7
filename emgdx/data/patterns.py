"""
Diagnostic pattern library.

Order matters: it is the tie-break order of the ranked output.
Each finding is (parameter path, condition, importance).
"""


def _pattern(pattern_id, name, description, category, findings):
    return {
        "id": pattern_id,
        "name": name,
        "description": description,
        "category": category,
        "key_findings": [
            {"parameter": parameter, "condition": condition, "importance": importance}
            for parameter, condition, importance in findings
        ],
    }


def _radiculopathy(pattern_id, name, roots, primary, secondary):
    return _pattern(
        pattern_id, name, f"compression of the {roots} nerve roots", "neuropathic",
        [
            (f"{primary}.fibrillations", "present", "high"),
            (f"{secondary}.fibrillations", "present", "high"),
            (f"{primary}.motorUnitPotentials.duration", ">10", "medium"),
            (f"{primary}.motorUnitPotentials.amplitude", ">5000", "medium"),
            (f"{primary}.recruitment.pattern", "reduced", "high"),
        ],
    )


DIAGNOSTIC_PATTERNS = [
    _pattern(
        "acute_axonal_neuropathy", "Acute axonal neuropathy",
        "neuropathic process of predominantly axonal type with acute features", "neuropathic",
        [
            ("fibrillations", "present", "high"),
            ("positiveWaves", "present", "high"),
            ("motorUnitPotentials.duration", ">10", "medium"),
            ("motorUnitPotentials.amplitude", ">5000", "medium"),
            ("recruitment.pattern", "reduced", "high"),
        ],
    ),
    _pattern(
        "chronic_axonal_neuropathy", "Chronic axonal neuropathy",
        "neuropathic process of predominantly axonal type with chronic features", "neuropathic",
        [
            ("fibrillations", "absent", "high"),
            ("motorUnitPotentials.duration", ">12", "high"),
            ("motorUnitPotentials.amplitude", ">6000", "high"),
            ("motorUnitPotentials.phases", ">4", "medium"),
            ("recruitment.pattern", "reduced", "high"),
        ],
    ),
    _pattern(
        "demyelinating_neuropathy", "Demyelinating neuropathy",
        "neuropathic process of predominantly demyelinating type", "neuropathic",
        [
            ("motorUnitPotentials.duration", "<8", "high"),
            ("motorUnitPotentials.amplitude", "<3000", "high"),
            ("recruitment.pattern", "early", "high"),
            ("fibrillations", "absent", "medium"),
        ],
    ),
    _pattern(
        "myopathy", "Myopathy", "myopathic process", "myopathic",
        [
            ("motorUnitPotentials.duration", "<8", "high"),
            ("motorUnitPotentials.amplitude", "<2000", "high"),
            ("motorUnitPotentials.phases", ">4", "medium"),
            ("recruitment.pattern", "early", "high"),
            ("fibrillations", "present", "medium"),
        ],
    ),
    _pattern(
        "normal", "Normal", "normal electromyographic study", "normal",
        [
            ("fibrillations", "absent", "high"),
            ("positiveWaves", "absent", "high"),
            ("motorUnitPotentials.duration", "=normal", "high"),
            ("motorUnitPotentials.amplitude", "=normal", "high"),
            ("recruitment.pattern", "normal", "high"),
        ],
    ),
    _radiculopathy("c5_c6_radiculopathy", "C5-C6 radiculopathy", "C5 and C6", "biceps_brachii", "deltoid"),
    _radiculopathy("c6_c7_radiculopathy", "C6-C7 radiculopathy", "C6 and C7", "triceps_brachii", "flexor_carpi_radialis"),
    _radiculopathy("l4_l5_radiculopathy", "L4-L5 radiculopathy", "L4 and L5", "tibialis_anterior", "peroneus_longus"),
    _radiculopathy("l5_s1_radiculopathy", "L5-S1 radiculopathy", "L5 and S1", "gastrocnemius", "soleus"),
    _pattern(
        "brachial_plexopathy", "Brachial plexopathy", "lesion of the brachial plexus", "neuropathic",
        [
            ("multiple_muscles.fibrillations", "present", "high"),
            ("multiple_muscles.motorUnitPotentials.duration", ">10", "medium"),
            ("multiple_muscles.motorUnitPotentials.amplitude", ">5000", "medium"),
            ("multiple_muscles.recruitment.pattern", "reduced", "high"),
            ("distribution", "multifocal", "high"),
        ],
    ),
    _pattern(
        "carpal_tunnel_syndrome_mild", "Carpal tunnel syndrome (mild)",
        "mild compression of the median nerve at the carpal tunnel", "neuropathic",
        [
            ("median_motor.latency", ">4.0", "high"),
            ("median_sensory.latency", ">3.5", "high"),
            ("abductor_pollicis_brevis.fibrillations", "absent", "medium"),
            ("abductor_pollicis_brevis.motorUnitPotentials.duration", "=normal", "medium"),
        ],
    ),
    _pattern(
        "carpal_tunnel_syndrome_moderate", "Carpal tunnel syndrome (moderate)",
        "moderate compression of the median nerve at the carpal tunnel", "neuropathic",
        [
            ("median_motor.latency", ">4.5", "high"),
            ("median_sensory.latency", ">4.0", "high"),
            ("abductor_pollicis_brevis.fibrillations", "present", "medium"),
            ("abductor_pollicis_brevis.motorUnitPotentials.duration", ">10", "medium"),
            ("abductor_pollicis_brevis.recruitment.pattern", "reduced", "high"),
        ],
    ),
    _pattern(
        "carpal_tunnel_syndrome_severe", "Carpal tunnel syndrome (severe)",
        "severe compression of the median nerve at the carpal tunnel", "neuropathic",
        [
            ("median_motor.latency", ">5.0", "high"),
            ("median_sensory.latency", ">4.5", "high"),
            ("abductor_pollicis_brevis.fibrillations", "present", "high"),
            ("abductor_pollicis_brevis.motorUnitPotentials.duration", ">12", "high"),
            ("abductor_pollicis_brevis.motorUnitPotentials.amplitude", ">6000", "high"),
            ("abductor_pollicis_brevis.recruitment.pattern", "reduced", "high"),
        ],
    ),
    _pattern(
        "tarsal_tunnel_syndrome", "Tarsal tunnel syndrome",
        "compression of the posterior tibial nerve at the tarsal tunnel", "neuropathic",
        [
            ("tibial_motor.latency", ">5.0", "high"),
            ("tibial_motor.amplitude", "<4.0", "medium"),
            ("plantar_medial.latency", ">4.0", "high"),
            ("abductor_hallucis.fibrillations", "present", "medium"),
            ("abductor_hallucis.motorUnitPotentials.duration", ">10", "medium"),
            ("abductor_hallucis.recruitment.pattern", "reduced", "high"),
        ],
    ),
    _pattern(
        "als", "Amyotrophic lateral sclerosis", "progressive neurodegenerative disease", "neuropathic",
        [
            ("multiple_muscles.fibrillations", "present", "high"),
            ("multiple_muscles.fasciculations", "present", "high"),
            ("multiple_muscles.motorUnitPotentials.duration", ">12", "high"),
            ("multiple_muscles.motorUnitPotentials.amplitude", ">6000", "high"),
            ("multiple_muscles.motorUnitPotentials.phases", ">4", "medium"),
            ("distribution", "generalized", "high"),
            ("chronicity", "progressive", "high"),
        ],
    ),
    _pattern(
        "myasthenia_gravis", "Myasthenia gravis", "autoimmune neuromuscular junction disorder",
        "neuromuscular_junction",
        [
            ("multiple_muscles.motorUnitPotentials.duration", "=normal", "high"),
            ("multiple_muscles.motorUnitPotentials.amplitude", "=normal", "high"),
            ("multiple_muscles.motorUnitPotentials.stability", "unstable", "high"),
            ("multiple_muscles.recruitment.pattern", "early", "high"),
            ("distribution", "proximal", "medium"),
        ],
    ),
]
