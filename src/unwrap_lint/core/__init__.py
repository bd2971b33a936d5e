"""
Core Package.

Contains the host machinery rules run on:
- Lexer and Parser (TypeScript subset -> ESTree-shaped `Node` tree)
- Traversal driver (`visit_*` / `leave_*` events)
- Fix records and application
- Lint Engine
"""
