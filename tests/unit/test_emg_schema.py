import pytest
from pydantic import ValidationError
from emgdx.schemas.emg import EMGResultSet, SpontaneousGrade


def test_same_muscle_under_two_keys_is_rejected(muscle):
    with pytest.raises(ValidationError, match="does not match its muscle id"):
        EMGResultSet.model_validate({"muscles": {
            "deltoid": muscle("deltoid"),
            "deltoid_again": muscle("deltoid", fib="present"),
        }})


def test_key_disagreeing_with_muscle_id_is_rejected(muscle):
    with pytest.raises(ValidationError):
        EMGResultSet.model_validate({"muscles": {"biceps_brachii": muscle("deltoid")}})


def test_missing_muscle_id_is_taken_from_key(muscle):
    entry = muscle("soleus")
    del entry["muscle"]

    result_set = EMGResultSet.model_validate({"muscles": {"soleus": entry}})

    assert result_set.muscles["soleus"].muscle == "soleus"


@pytest.mark.parametrize("raw, grade", [
    (True, SpontaneousGrade.PRESENT),
    (False, SpontaneousGrade.ABSENT),
    (0, SpontaneousGrade.ABSENT),
    (3, SpontaneousGrade.PLUS_3),
    (7, SpontaneousGrade.PLUS_4),
])
def test_graded_findings_accept_booleans_and_integers(muscle, raw, grade):
    entry = muscle("deltoid")
    entry["spontaneousActivity"]["fibrillations"] = raw

    result_set = EMGResultSet.model_validate({"muscles": {"deltoid": entry}})

    assert result_set.muscles["deltoid"].spontaneous_activity.fibrillations == grade
