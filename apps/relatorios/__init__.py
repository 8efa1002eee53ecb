# apps/relatorios/__init__.py

"""
Relatórios - Exportação de tarefas

Funcionalidades:
- Exportação CSV filtrada por role e status
"""
