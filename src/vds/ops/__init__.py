"""
Operations shared by the REST and MCP front ends.

Each function takes an :class:`~vds.ops.context.OperationContext` first.
Reads run on a pooled trunk session; writes go through the branched
mutation orchestrator.  Every function returns a
:class:`~vds.ops.result.Versioned` payload and raises
:class:`~vds.core.errors.VdsError` subclasses on failure.
"""
