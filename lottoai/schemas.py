from __future__ import annotations
from typing import List, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Annotated, Literal

AIStrategy = Literal["balanced", "hot", "overdue"]

class NumberRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self):
        if self.min > self.max:
            raise ValueError(f"range min {self.min} is greater than max {self.max}")
        return self

    def __contains__(self, n: int) -> bool:
        return self.min <= n <= self.max

    def numbers(self) -> range:
        return range(self.min, self.max + 1)

class Pool(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=1)
    range: NumberRange

    @model_validator(mode="after")
    def _fits(self):
        size = self.range.max - self.range.min + 1
        if self.count > size:
            raise ValueError(f"cannot draw {self.count} numbers from a range of {size}")
        return self

class SingleDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    main: Pool

class DualDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["dual"] = "dual"
    main: Pool
    special: Pool
    special_name: str = Field(min_length=1)

GameShape = Annotated[Union[SingleDomain, DualDomain], Field(discriminator="kind")]

class LotteryConfig(BaseModel):
    """A lottery game: its name plus a single or dual number-pool shape.

    Browser clients may still post the flat camelCase layout
    (``mainNumbersCount``, ``specialName`` ...); it is folded into ``shape``.
    """
    model_config = ConfigDict(frozen=True)

    game_name: str = Field(validation_alias=AliasChoices("game_name", "gameName"))
    shape: GameShape

    @model_validator(mode="before")
    @classmethod
    def _from_flat(cls, data):
        if not isinstance(data, dict) or "shape" in data:
            return data
        if "mainNumbersCount" not in data:
            return data
        out = {
            "game_name": data.get("gameName", data.get("game_name")),
            "shape": {
                "kind": "single",
                "main": {"count": data.get("mainNumbersCount"), "range": data.get("mainNumbersRange")},
            },
        }
        special = [data.get(k) for k in ("specialName", "specialNumbersCount", "specialNumbersRange")]
        if all(v is None for v in special):
            return out
        if any(v is None for v in special):
            raise ValueError("specialName, specialNumbersCount and specialNumbersRange must be set together")
        name, count, rng = special
        out["shape"].update(kind="dual", special={"count": count, "range": rng}, special_name=name)
        return out

    @property
    def main(self) -> Pool:
        return self.shape.main

    @property
    def special(self) -> Optional[Pool]:
        return self.shape.special if isinstance(self.shape, DualDomain) else None

    @property
    def special_name(self) -> Optional[str]:
        return self.shape.special_name if isinstance(self.shape, DualDomain) else None

class Draw(BaseModel):
    main: List[int]
    special: List[int] = []

class NumberAnalysis(BaseModel):
    number: int
    value: int

class AnalysisResults(BaseModel):
    hot_numbers: List[NumberAnalysis] = []
    cold_numbers: List[NumberAnalysis] = []
    overdue_numbers: List[NumberAnalysis] = []

class AnalysisReport(BaseModel):
    draw_count: int = 0
    main: AnalysisResults
    special: AnalysisResults | None = None

class PredictedNumbers(BaseModel):
    main_numbers: List[int] = Field(validation_alias=AliasChoices("main_numbers", "mainNumbers"))
    special_numbers: List[int] = Field(default=[], validation_alias=AliasChoices("special_numbers", "specialNumbers"))
    explanation: str = ""

class HitScore(BaseModel):
    main_hits: List[int] = []
    special_hits: List[int] = []

class AnalyzeRequest(BaseModel):
    historical_data: str = Field(default="", validation_alias=AliasChoices("historical_data", "historicalData"))
    config: LotteryConfig

class PredictRequest(AnalyzeRequest):
    strategy: AIStrategy = "balanced"

class ScanRequest(BaseModel):
    image_base64: str = Field(min_length=1, validation_alias=AliasChoices("image_base64", "imageBase64"))
    mime_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("mime_type", "mimeType"))
    historical_data: str = Field(default="", validation_alias=AliasChoices("historical_data", "historicalData"))

class CleanRequest(BaseModel):
    historical_data: str = Field(default="", validation_alias=AliasChoices("historical_data", "historicalData"))

class HistoricalData(BaseModel):
    historical_data: str

class ScoreRequest(BaseModel):
    predicted: PredictedNumbers
    actual_main: List[int] = Field(validation_alias=AliasChoices("actual_main", "actualMain"))
    actual_special: List[int] = Field(default=[], validation_alias=AliasChoices("actual_special", "actualSpecial"))
