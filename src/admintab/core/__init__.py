"""
Core package for admintab contracts (grammar, descriptors, builder, registry, page requests).

## Contracts (single source of truth)
- Grammar: enums for field types, widgets, filter operators, actions; lower_snake helpers.
- Descriptors: frozen TableDescriptor/ColumnSpec/FormFieldSpec/ActionSpec values.
- Builder: local accumulator producing validated descriptors.
- Registry: explicit name -> builder mapping, frozen before traffic.
- Query: PageRequest/Page models shared by relational and custom data sources.
- Values: tagged scalar normalization for rows crossing the data-source boundary.
- Forms/Display/Actions: submission rule, display projection, action invocation.

## Notes
- Zero-IO policy: stdlib + pydantic only; no database, file or network access.
- Naming policy: enum `.value`, table names, field names and action ids are lower_snake.
- Joined columns are read-only projections named `{table}_joined_{field}`.

## Downstream usage
- admintab.io: interprets RelationalSource against SQLite and dispatches custom sources
  with graceful degradation.
- admintab.tables: demo builders registered by `build_registry()`.
- app: Streamlit router and pages resolve descriptors per request.

## Examples
```python
from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.grammar import FieldType
from admintab.core.registry import TableRegistry

def notes(ctx: RequestContext):
    return (
        TableBuilder("notes", title="Notes")
        .add_column("ID", "id", FieldType.INT, sortable=True)
        .add_column("Body", "body", filter="like")
        .set_table("notes")
        .build()
    )

registry = TableRegistry()
registry.register("notes", notes)
registry.freeze(probe=RequestContext())
registry.resolve("notes", RequestContext()).sortable_keys  # ('id',)
```
"""
