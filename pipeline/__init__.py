"""
Pipeline package for the pest diagnosis service.

Contains:
- `state`   : Typed `DiagnosisState` definition
- `prompts` : Fixed instruction requesting the diagnosis JSON schema
- `extract` : Ordered strategies for pulling JSON out of model text
- `nodes`   : LangGraph node callables operating over `DiagnosisState`
- `graph`   : StateGraph builder and compiled `pipeline`
"""
