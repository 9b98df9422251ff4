"""Step selection glue.

- `wp_starter.framework.locator`: shared context handed to step constructors
- `wp_starter.framework.selected_steps_factory`: resolves which steps run, in which order

Generic, project-agnostic primitives live in `stepkit`.
"""
