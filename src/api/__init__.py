"""API: camada de borda HTTP.

Responsabilidades:
- Receber uploads em partes e pedidos de merge
- Expor criação, continuação e status de tasks de lote
- Resolver endereços de proxy (/proxy/v1/{token})
- Mapear erros de domínio para códigos HTTP

Subpastas:
- routes/: endpoints HTTP (health, media, proxy)

NÃO PODE conter: regras de roteamento, estado de task, acesso direto a stores.
"""
