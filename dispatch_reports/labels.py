"""pt-BR strings printed in reports."""

from __future__ import annotations

NOT_INFORMED = "Não informado"
INVALID_DATE = "Data inválida"
IMAGE_UNAVAILABLE = "Imagem indisponível"
NO_RECORDS = "Nenhum registro"
YES = "Sim"
NO = "Não"

STATUS_LABELS = {
    "pending": "Pendente",
    "in-progress": "Em Andamento",
    "completed": "Concluído",
    "cancelled": "Cancelado",
}

PRIORITY_LABELS = {
    "low": "Baixa",
    "medium": "Média",
    "high": "Alta",
    "urgent": "Urgente",
}

ROLE_LABELS = {
    "tecnico": "Técnico",
    "gestor": "Gestor",
    "administrador": "Administrador",
    "cliente": "Cliente",
}

KIND_TITLES = {
    "single-service-detailed": ("RELATÓRIO DE SERVIÇO", "Ordem de serviço detalhada"),
    "executive-summary": ("RELATÓRIO EXECUTIVO", "Visão geral de performance e KPIs"),
    "operational-detail": ("RELATÓRIO OPERACIONAL", "Detalhes técnicos e operacionais"),
    "team-performance": ("PERFORMANCE DA EQUIPE", "Análise detalhada dos técnicos"),
    "service-type-analysis": ("ANÁLISE DE SERVIÇOS", "Breakdown detalhado por categoria"),
}

SECTION_GENERAL = "INFORMAÇÕES GERAIS"
SECTION_CHECKLIST = "CHECKLIST TÉCNICO"
SECTION_PHOTOS = "REGISTRO FOTOGRÁFICO"
SECTION_MESSAGES = "HISTÓRICO DE MENSAGENS"
SECTION_SIGNATURES = "ASSINATURAS"
SECTION_FEEDBACK = "AVALIAÇÃO DO CLIENTE"
SECTION_EXECUTIVE = "RESUMO EXECUTIVO"
SECTION_STATUS = "SERVIÇOS POR STATUS"
SECTION_PRIORITY = "SERVIÇOS POR PRIORIDADE"
SECTION_TYPE = "SERVIÇOS POR TIPO"
SECTION_TOP_PERFORMERS = "TOP PERFORMERS"
SECTION_DETAILS = "DETALHES DOS SERVIÇOS"
SECTION_TEAM = "VISÃO GERAL DA EQUIPE"
SECTION_TEAM_METRICS = "MÉTRICAS DE PERFORMANCE"
SECTION_TOP_CLIENTS = "CLIENTES COM MAIS SERVIÇOS"

SIGNATURE_CLIENT = "Assinatura do cliente"
SIGNATURE_TECHNICIAN = "Assinatura do técnico"
GENERATED_ON = "Gerado em"
PAGE_OF = "Página {page} de {total}"
UNSPECIFIED_TYPE = "Não especificado"
