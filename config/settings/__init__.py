"""Settings package for the Stayhub project.

`base.py` holds configuration shared by every environment. `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
