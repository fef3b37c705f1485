"""Subscription plans and limit checks"""
from typing import Dict, List, Optional, Union

from rankriot.db.enums import PlanId


UNLIMITED = -1

# Plan order (lowest to highest)
PLAN_ORDER: List[str] = [
    PlanId.FREE.value,
    PlanId.STARTER.value,
    PlanId.PRO.value,
    PlanId.BUSINESS.value,
]


class PlanLimits:
    """Plan limits configuration (must match the subscription_plans table)"""

    FREE = {
        "max_projects": 2,
        "max_pages_per_scan": 250,
        "scan_frequency": "weekly",
        "max_keywords": 25,
        "history_days": 14,
        "max_team_members": 1,
        "max_competitors": 1,
        "features": {
            "pdf_reports": False,
            "on_demand_scans": False,
        },
    }

    STARTER = {
        "max_projects": 5,
        "max_pages_per_scan": 2500,
        "scan_frequency": "weekly",
        "max_keywords": 100,
        "history_days": 90,
        "max_team_members": 1,
        "max_competitors": 3,
        "features": {
            "pdf_reports": False,
            "on_demand_scans": False,
        },
    }

    PRO = {
        "max_projects": 15,
        "max_pages_per_scan": 25000,
        "scan_frequency": "daily",
        "max_keywords": 500,
        "history_days": 365,
        "max_team_members": 3,
        "max_competitors": 5,
        "features": {
            "pdf_reports": True,
            "on_demand_scans": False,
        },
    }

    BUSINESS = {
        "max_projects": UNLIMITED,
        "max_pages_per_scan": 100000,
        "scan_frequency": "daily",
        "max_keywords": 2000,
        "history_days": 730,
        "max_team_members": 5,
        "max_competitors": 10,
        "features": {
            "pdf_reports": True,
            "on_demand_scans": True,
        },
    }


# Plan display information (prices in USD)
PLAN_INFO: Dict[str, Dict] = {
    "free": {
        "name": "Free",
        "description": "Perfect for trying out RankRiot",
        "price_monthly": 0,
        "price_yearly": 0,
        "popular": False,
    },
    "starter": {
        "name": "Starter",
        "description": "For freelancers and small sites",
        "price_monthly": 9,
        "price_yearly": 84,
        "popular": False,
    },
    "pro": {
        "name": "Pro",
        "description": "For growing businesses and consultants",
        "price_monthly": 29,
        "price_yearly": 288,
        "popular": True,
    },
    "business": {
        "name": "Business",
        "description": "For agencies and larger teams",
        "price_monthly": 59,
        "price_yearly": 588,
        "popular": False,
    },
}


def _plan_key(plan_id: Optional[Union[str, PlanId]]) -> str:
    if isinstance(plan_id, PlanId):
        return plan_id.value
    if plan_id in PLAN_ORDER:
        return plan_id
    return PlanId.FREE.value


def get_plan_limits(plan_id: Optional[Union[str, PlanId]]) -> Dict:
    """Get limits for a plan; no plan (or an unknown one) means free"""
    plan_map = {
        "free": PlanLimits.FREE,
        "starter": PlanLimits.STARTER,
        "pro": PlanLimits.PRO,
        "business": PlanLimits.BUSINESS,
    }
    return plan_map[_plan_key(plan_id)]


def can_create_project(plan_id: Optional[str], current_project_count: int) -> bool:
    """Check if user can create another project"""
    limits = get_plan_limits(plan_id)
    if limits["max_projects"] == UNLIMITED:
        return True
    return current_project_count < limits["max_projects"]


def can_start_scan(plan_id: Optional[str], estimated_pages: int) -> bool:
    """Check if a scan of the given size fits the plan"""
    return estimated_pages <= get_plan_limits(plan_id)["max_pages_per_scan"]


def has_daily_scans(plan_id: Optional[str]) -> bool:
    return get_plan_limits(plan_id)["scan_frequency"] == "daily"


def has_on_demand_scans(plan_id: Optional[str]) -> bool:
    return get_plan_limits(plan_id)["features"]["on_demand_scans"]


def has_pdf_reports(plan_id: Optional[str]) -> bool:
    return get_plan_limits(plan_id)["features"]["pdf_reports"]


def get_remaining_projects(plan_id: Optional[str], current_project_count: int) -> Union[int, str]:
    """Remaining project slots, or "unlimited" """
    limits = get_plan_limits(plan_id)
    if limits["max_projects"] == UNLIMITED:
        return "unlimited"
    return max(0, limits["max_projects"] - current_project_count)


def format_project_limit(plan_id: Optional[str]) -> str:
    limits = get_plan_limits(plan_id)
    if limits["max_projects"] == UNLIMITED:
        return "Unlimited"
    return str(limits["max_projects"])


def format_page_limit(plan_id: Optional[str]) -> str:
    return f"{get_plan_limits(plan_id)['max_pages_per_scan']:,}"


def get_upgrade_recommendation(current_plan: Optional[str], limit_type: str = "projects") -> Optional[str]:
    """
    Recommend the plan to upgrade to after hitting a limit.

    Every limit type (projects, pages, keywords, frequency) recommends the
    next tier up.

    Returns:
        Next plan id, or None when already on the highest plan
    """
    current_index = PLAN_ORDER.index(_plan_key(current_plan))
    if current_index >= len(PLAN_ORDER) - 1:
        return None
    return PLAN_ORDER[current_index + 1]


def is_higher_plan(plan_a: str, plan_b: str) -> bool:
    """Check if plan_a ranks above plan_b"""
    return PLAN_ORDER.index(_plan_key(plan_a)) > PLAN_ORDER.index(_plan_key(plan_b))


def list_plans() -> List[Dict]:
    """All plans with display info and limits, lowest first"""
    return [
        {"id": plan, **PLAN_INFO[plan], "limits": get_plan_limits(plan)}
        for plan in PLAN_ORDER
    ]
