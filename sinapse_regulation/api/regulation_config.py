from fastapi import APIRouter

from sinapse_regulation.workflow.transitions import (
    ACTIVE_STATUSES,
    DENIAL_STATUSES,
    FINAL_STATUSES,
    NIR_TRANSITIONS,
    STATUS_CONFIG,
    SUPPORT_TYPES,
)

router = APIRouter(prefix="/api/regulation", tags=["regulation"])


@router.get("/config")
async def regulation_config() -> dict:
    """Static labels and the NIR transition map, so clients render only legal actions."""
    return {
        "support_types": [
            {"type": st.value, "label": cfg.label, "emoji": cfg.emoji}
            for st, cfg in SUPPORT_TYPES.items()
        ],
        "statuses": {
            status.value: {
                "label": cfg.label,
                "short_label": cfg.short_label,
                "description": cfg.description,
            }
            for status, cfg in STATUS_CONFIG.items()
        },
        "transitions": {
            status.value: [
                {
                    "status": t.status.value,
                    "label": t.label,
                    "requires_justification": t.requires_justification,
                }
                for t in transitions
            ]
            for status, transitions in NIR_TRANSITIONS.items()
        },
        "denial_statuses": sorted(s.value for s in DENIAL_STATUSES),
        "final_statuses": sorted(s.value for s in FINAL_STATUSES),
        "active_statuses": [s.value for s in ACTIVE_STATUSES],
    }
