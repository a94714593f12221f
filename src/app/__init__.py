"""App: núcleo do media relay: roteamento, lotes e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos de domínio (referências, sessões de upload, tasks) e erros
- use_cases/: casos de uso (backlog síncrono vs. continuação)
- services/: roteador de armazenamento, upload em partes, proxy, agendador
- infra/: implementações concretas de IO (HTTP, image host, origem, stores)
- protocols/: contratos/interfaces
- observability/: correlation_id e métricas via log

Padrão: app executa; api adapta; config configura; utils apoia.
"""
