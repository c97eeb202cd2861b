"""
Services module for the scaffold.

- crud/: Resource definitions, controller, rule composition, validation,
  dependency guard, repository contract, uploads and presenters
"""
