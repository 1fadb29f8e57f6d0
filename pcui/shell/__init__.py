"""
Interactive Shell Module.

Line-oriented shell for Personium Cells and Boxes.

Architecture:
- commands: per-mode command grammar parsed into enums
- state: immutable NavigationState (unauthenticated / Cell / Box)
- navigator: dispatches parsed commands to the Cell and Box clients
- messages: prints output with a `# ` prefix and writes the operation log
- history: recently used Cell URLs offered at login
- repl: login prompts and the read-eval-print loop (Rich)

Usage:
    pcui
    pcui --log-save
"""
