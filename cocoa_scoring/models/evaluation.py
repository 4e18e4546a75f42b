"""
Evaluation Models - Cocoa Contest Scoring Engine
cocoa_scoring/models/evaluation.py

Raw judge attributes for the two scoring schemes and the stored evaluation
record. The schemes form a closed tagged union on ``scheme``:

    ChocolateAttributes  - weighted five-category chocolate scheme
    CocoaBeanAttributes  - bean/liquor scheme, overall quality given directly
"""

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cocoa_scoring.models.enumerations import EvaluationStage, ScoringScheme, Verdict

# Every judge attribute lives on a 0-10 scale
Score = Annotated[float, Field(ge=0, le=10)]


class _Group(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Chocolate scheme
# ---------------------------------------------------------------------------

class ChocolateAppearance(_Group):
    color: Score = 0
    gloss: Score = 0
    surface_homogeneity: Score = 0


class ChocolateAroma(_Group):
    aroma_intensity: Score = 0
    aroma_quality: Score = 0
    # Descriptive only (floral, fruity, toasted, ...); never scored
    specific_notes: Dict[str, Score] = Field(default_factory=dict)


class ChocolateTexture(_Group):
    smoothness: Score = 0
    melting: Score = 0
    body: Score = 0


class ChocolateFlavor(_Group):
    sweetness: Score = 0
    bitterness: Score = 0
    acidity: Score = 0
    flavor_intensity: Score = 0
    # Descriptive only (citrus, red fruits, nuts, ...); never scored
    flavor_notes: Dict[str, Score] = Field(default_factory=dict)


class ChocolateAftertaste(_Group):
    persistence: Score = 0
    aftertaste_quality: Score = 0
    final_balance: Score = 0


class ChocolateAttributes(BaseModel):
    """Chocolate tasting sheet. Missing attributes count as 0."""

    scheme: Literal["chocolate"] = "chocolate"
    appearance: ChocolateAppearance = Field(default_factory=ChocolateAppearance)
    aroma: ChocolateAroma = Field(default_factory=ChocolateAroma)
    texture: ChocolateTexture = Field(default_factory=ChocolateTexture)
    flavor: ChocolateFlavor = Field(default_factory=ChocolateFlavor)
    aftertaste: ChocolateAftertaste = Field(default_factory=ChocolateAftertaste)


# ---------------------------------------------------------------------------
# Cocoa bean / liquor scheme
# ---------------------------------------------------------------------------

class AcidityNotes(_Group):
    frutal: Score = 0
    acetic: Score = 0
    lactic: Score = 0
    mineral_butyric: Score = 0


class FreshFruitNotes(_Group):
    berries: Score = 0
    citrus: Score = 0
    yellow_pulp: Score = 0
    dark: Score = 0
    tropical: Score = 0


class BrownFruitNotes(_Group):
    dry: Score = 0
    brown: Score = 0
    overripe: Score = 0


class VegetalNotes(_Group):
    grass_herb: Score = 0
    earthy: Score = 0


class FloralNotes(_Group):
    orange_blossom: Score = 0
    flowers: Score = 0


class WoodNotes(_Group):
    light: Score = 0
    dark: Score = 0
    resin: Score = 0


class SpiceNotes(_Group):
    spices: Score = 0
    tobacco: Score = 0
    umami: Score = 0


class NutNotes(_Group):
    kernel: Score = 0
    skin: Score = 0


class DefectNotes(_Group):
    dirty: Score = 0
    animal: Score = 0
    rotten: Score = 0
    smoke: Score = 0
    humid: Score = 0
    moldy: Score = 0
    overfermented: Score = 0
    other: Score = 0


class CocoaBeanAttributes(BaseModel):
    """
    Bean / liquor tasting sheet.

    ``overall_quality`` is the judge's own score and is stored as-is. Group
    totals and the advisory quality are derived for display only.
    """

    scheme: Literal["cocoa"] = "cocoa"
    evaluation_type: Literal["cocoa_mass", "chocolate"] = "cocoa_mass"
    overall_quality: Score = Field(..., description="Judge-assigned overall quality")

    cacao: Score = 0
    bitterness: Score = 0
    astringency: Score = 0
    caramel_panela: Score = 0
    roast_degree: Score = 0
    sweetness: Optional[Score] = None

    acidity: AcidityNotes = Field(default_factory=AcidityNotes)
    fresh_fruit: FreshFruitNotes = Field(default_factory=FreshFruitNotes)
    brown_fruit: BrownFruitNotes = Field(default_factory=BrownFruitNotes)
    vegetal: VegetalNotes = Field(default_factory=VegetalNotes)
    floral: FloralNotes = Field(default_factory=FloralNotes)
    wood: WoodNotes = Field(default_factory=WoodNotes)
    spice: SpiceNotes = Field(default_factory=SpiceNotes)
    nut: NutNotes = Field(default_factory=NutNotes)
    defects: DefectNotes = Field(default_factory=DefectNotes)

    texture_notes: Optional[str] = Field(default=None, max_length=2000)


EvaluationAttributes = Annotated[
    Union[ChocolateAttributes, CocoaBeanAttributes],
    Field(discriminator="scheme"),
]


class EvaluationSubmission(BaseModel):
    """Body of PUT /samples/{sample_id}/evaluations/{judge_id}."""

    attributes: EvaluationAttributes
    verdict: Verdict = Field(
        default=Verdict.APPROVED,
        description="Judge verdict; only Approved evaluations are ranked",
    )
    disqualification_reasons: List[str] = Field(default_factory=list)
    flavor_comments: Optional[str] = Field(default=None, max_length=2000)
    producer_recommendations: Optional[str] = Field(default=None, max_length=2000)
    additional_positive: Optional[str] = Field(default=None, max_length=2000)
    evaluated_at: Optional[datetime] = Field(
        default=None,
        description="Evaluation timestamp (defaults to now)",
    )

    @model_validator(mode="after")
    def validate_verdict_reasons(self):
        """Disqualified verdicts must carry at least one reason."""
        if self.verdict == Verdict.DISQUALIFIED and not self.disqualification_reasons:
            raise ValueError("disqualification_reasons required when verdict is Disqualified")
        return self


class EvaluationRecord(BaseModel):
    """One stored evaluation: unique per (sample, judge, stage)."""

    id: str
    sample_id: str
    contest_id: str
    judge_id: str
    stage: EvaluationStage
    scheme: ScoringScheme
    overall_quality: float = Field(ge=0, le=10)
    verdict: Verdict = Verdict.APPROVED
    disqualification_reasons: List[str] = Field(default_factory=list)
    attributes: EvaluationAttributes
    flavor_comments: Optional[str] = None
    producer_recommendations: Optional[str] = None
    additional_positive: Optional[str] = None
    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)


class EvaluationResponse(EvaluationRecord):
    """Stored evaluation plus derived display values."""

    advisory_quality: Optional[float] = Field(
        default=None,
        description="Cocoa scheme only: display quality, never ranked",
    )
    group_totals: Optional[Dict[str, float]] = None
    category_breakdown: Optional[Dict[str, Dict[str, float]]] = None
