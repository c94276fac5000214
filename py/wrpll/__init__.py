'''Divider planning for the Haswell WRPLL pixel clock.'''

from .plan_tools import PlanningFailed
from .plan_wrpll import WRPLLPlan, compute_dividers, wrpll_plan
from .wrpll_budget import budget_for
from .wrpll_table import WRPLL_TABLE, check_table
