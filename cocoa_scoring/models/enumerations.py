from enum import Enum

class ProductCategory(str, Enum):
    BEAN = "bean"
    LIQUOR = "liquor"
    CHOCOLATE = "chocolate"

class SampleStatus(str, Enum):
    SUBMITTED = "submitted"
    RECEIVED = "received"
    PHYSICAL_EVALUATION = "physical_evaluation"
    APPROVED = "approved"
    DISQUALIFIED = "disqualified"   # Terminal
    EVALUATED = "evaluated"

class GlobalEvaluation(str, Enum):
    PASSED = "passed"
    DISQUALIFIED = "disqualified"

class Verdict(str, Enum):
    APPROVED = "Approved"
    DISQUALIFIED = "Disqualified"

class ContestStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"

class EvaluationStage(str, Enum):
    SENSORY = "sensory"   # Initial results
    FINAL = "final"       # Final chocolate round

class ScoringScheme(str, Enum):
    CHOCOLATE = "chocolate"
    COCOA = "cocoa"

class OutlierStrategy(str, Enum):
    EXCLUDE = "exclude"
    REDUCE_WEIGHT = "reduce_weight"
