"""SmartBudget: transaction summaries, monthly budgets and chart series."""

__version__ = "0.1.0"
