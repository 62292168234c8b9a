from decimal import Decimal

from fastapi import FastAPI
from pydantic import BaseModel, Field

from coopcredit.domain.scoring import fallback_score

app = FastAPI(title="Mock Risk Bureau", version="1.0.0")


class EvaluationRequest(BaseModel):
    documento: str = Field(..., min_length=1)
    montoSolicitado: Decimal = Field(..., gt=0)
    plazoMeses: int = Field(..., gt=0)


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/risk-evaluation")
def evaluate(body: EvaluationRequest):
    # Same mapping as the offline fallback, so outages do not change decisions
    score, level, detail = fallback_score(body.documento)
    return {"documento": body.documento, "score": score, "riskLevel": level.value, "detail": detail}
