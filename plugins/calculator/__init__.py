"""Calculator plugin manifest."""

manifest = {
    "title": "Calculator",
    "summary": "Keypad calculator with a safe expression evaluator, rolling history, result graph and an AI explainer.",
    "category": "General Utilities",
    "blueprint": "calculator",
}

__all__ = ["manifest"]
