from plangate.plan.terraform import read_plan_text, render_plan

__all__ = ["read_plan_text", "render_plan"]
