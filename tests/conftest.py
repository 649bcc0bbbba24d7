from typing import AsyncGenerator, Optional
import pytest
from httpx import AsyncClient, ASGITransport

from emgdx.main import app
from emgdx.data.store import ReferenceDataStore, get_reference_store
from emgdx.schemas.emg import EMGResultSet


@pytest.fixture(scope="session")
def store() -> ReferenceDataStore:
    """
    One store for the whole run; it is read-only.
    """
    return ReferenceDataStore.load_default()


@pytest.fixture(scope="function")
async def client(store) -> AsyncGenerator[AsyncClient, None]:
    """
    Creates a FastAPI Test Client that uses the session-wide store.
    """
    app.dependency_overrides[get_reference_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def muscle():
    """
    Builds one muscle entry as the form layer sends it (camelCase).
    Defaults describe a normal deltoid.
    """
    def _build(
        name: str = "deltoid",
        fib: str = "absent",
        pw: str = "absent",
        fasc: str = "absent",
        duration: float = 10.0,
        amplitude: float = 1000.0,
        phases: int = 3,
        stability: Optional[str] = None,
        recruitment: str = "normal",
    ) -> dict:
        mup = {"duration": duration, "amplitude": amplitude, "phases": phases}
        if stability is not None:
            mup["stability"] = stability
        return {
            "muscle": name,
            "spontaneousActivity": {
                "fibrillations": fib,
                "positiveWaves": pw,
                "fasciculations": fasc,
            },
            "motorUnitPotentials": mup,
            "recruitment": {"pattern": recruitment},
        }
    return _build


@pytest.fixture
def panel():
    """
    Builds an EMGResultSet from muscle entries and an optional NCS map.
    """
    def _build(*muscles: dict, ncs: Optional[dict] = None) -> EMGResultSet:
        payload = {"muscles": {m["muscle"]: m for m in muscles}}
        if ncs is not None:
            payload["ncsResults"] = ncs
        return EMGResultSet.model_validate(payload)
    return _build
