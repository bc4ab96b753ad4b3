"""Static substation catalog for the Suphan Buri service area."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Substation:
    id: str
    name: str
    lat: float
    lng: float


SUBSTATIONS: tuple[Substation, ...] = (
    Substation(id="sam-chuk", name="สามชุก", lat=14.755, lng=100.095),
    Substation(id="si-prachan", name="ศรีประจันต์", lat=14.625, lng=100.142),
    Substation(id="dan-chang", name="ด่านช้าง", lat=14.838, lng=99.695),
    Substation(id="doem-bang", name="เดิมบางนางบวช", lat=14.855, lng=100.045),
    Substation(id="suphan-buri-1", name="สุพรรณบุรี 1", lat=14.475, lng=100.122),
    Substation(id="suphan-buri-2", name="สุพรรณบุรี 2", lat=14.455, lng=100.105),
)
