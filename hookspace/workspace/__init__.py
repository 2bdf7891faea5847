"""Workspace resolution pipeline.

- **discovery**: Find projects under the workspace root (parallel walk, selectors, ordering)
- **resolver**: Fetch each distinct remote repo once and share it across projects
- **assembler**: Merge hook layers into the globally ordered ``Hook`` list
- **staging**: Refuse to run with unstaged configuration files
- **pipeline**: resolver -> assembler for a whole workspace
- **reporter**: Progress callbacks for repo fetching
"""
