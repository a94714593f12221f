"""Rotas HTTP da API: adapters de entrada.

Responsabilidades:
- Definir endpoints HTTP (upload, tasks, proxy, health)
- Validação inicial de request (form, JSON, path)
- Delegação para services/use_cases
- Mapeamento de erros de domínio para status HTTP

Estrutura:
- routes/media/: upload em partes e processamento de backlog
- routes/proxy/: resolução de endereços de proxy
- routes/health/: health checks e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
