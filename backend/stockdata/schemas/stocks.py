from datetime import date

from pydantic import BaseModel


class VolumePeakOut(BaseModel):
    date: date
    symbol: str
    volume: float


class HighestVolumeOut(BaseModel):
    highest_volume: list[VolumePeakOut]


class AverageCloseOut(BaseModel):
    symbol: str
    start_date: date
    end_date: date
    average_close: float


class AverageVwapOut(BaseModel):
    symbol: str
    start_date: date
    end_date: date
    average_vwap: float
