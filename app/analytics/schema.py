# ==============================================================================
# app/analytics/schema.py
# ------------------------------------------------------------------------------
# Defines the expected structure of the PEX and Vendas spreadsheets.
# This schema is the single source of truth for the loaders and the
# parameter store: sheet ranges, header aliases and writable columns.
# ==============================================================================

# --- PEX spreadsheet ranges ---
RESULTS_RANGE = 'DEVERIA!A:V'
HISTORY_RANGE = 'HISTORICO!A:Z'
WEIGHTS_RANGE = 'CRITERIOS RANKING!B:F'
GOALS_RANGE = 'METAS POR CLUSTER!A:H'
GOALS_FALLBACK_RANGE = 'METASPORCLUSTER!A:H'
UNITS_RANGE = 'UNI CONS!A:G'
CONSULTANTS_RANGE = 'UNI CONS!A:F'

# --- Header aliases ---
# Canonical field id -> every header spelling seen upstream.
# Resolved once per load by loader.resolve_headers.
PEX_ALIASES = {
    'unit': ['nm_unidade'],
    'quarter': ['QUARTER'],
    'cluster': ['cluster', 'Cluster', 'CLUSTER'],
    'consultant': ['Consultor', 'CONSULTOR', 'consultor', 'CONSULTOR RESPONSAVEL',
                   'Consultor Responsável', 'Consultor Responsavel'],
    'bonus': ['Bonus', 'Bônus', 'BONUS'],
    'score_without_bonus': ['Pontuação sem bonus', 'Pontuação sem Bonus', 'Pontuação sem Bônus'],
    'score': ['Pontuação com bonus', 'Pontuação com Bonus', 'Pontuação com Bônus'],
    'vvr': ['VVR'],
    'mac': ['MAC'],
    'indebtedness': ['Endividamento'],
    'nps': ['NPS'],
    'margin': ['MC %\n(entrega)', 'MC % (entrega)', 'MC %(entrega)', 'MC%'],
    'enps': ['Satisfação do colaborador - e-NPS', 'Satisfacao do colaborador - e-NPS'],
    'conformity': ['*Conformidades', 'Conformidades', '%Conformidades'],
    'date': ['data'],
}

# Fields that hold text, everything else is an indicator read on demand
TEXT_FIELDS = ('unit', 'quarter', 'cluster', 'consultant', 'date')

# --- The seven PEX indicators ---
# weight_name is how the indicator is spelled in CRITERIOS RANKING
INDICATORS = [
    {'field': 'vvr', 'code': 'VVR', 'title': 'VVR',
     'description': 'VALOR DE VENDAS REALIZADAS', 'weight_name': 'VVR'},
    {'field': 'mac', 'code': 'MAC', 'title': 'MAC',
     'description': 'META DE ATINGIMENTO DE CONTRATO', 'weight_name': 'MAC'},
    {'field': 'indebtedness', 'code': 'Endividamento', 'title': 'ENDIVIDAMENTO',
     'description': 'PERCENTUAL DE ENDIVIDAMENTO', 'weight_name': 'ENDIVIDAMENTO'},
    {'field': 'nps', 'code': 'NPS', 'title': 'NPS SEMESTRAL',
     'description': 'NET PROMOTER SCORE', 'weight_name': 'NPS'},
    {'field': 'margin', 'code': 'MC_PERCENTUAL', 'title': 'MC % (ENTREGA)',
     'description': 'MARGEM DE CONTRIBUIÇÃO DA FRANQUIA', 'weight_name': '% MC (ENTREGA)'},
    {'field': 'enps', 'code': 'ENPS', 'title': 'SATISF. COLABORADOR - e-NPS',
     'description': 'NET PROMOTER SCORE', 'weight_name': 'E-NPS'},
    {'field': 'conformity', 'code': 'CONFORMIDADES', 'title': 'CONFORMIDADES',
     'description': 'NÍVEL DE CONFORMIDADE', 'weight_name': '% CONFORMIDADES'},
]

# Columns of the summary table (dashboard page)
SUMMARY_COLUMNS = [
    ('unit', 'Unidade'),
    ('cluster', 'Cluster'),
    ('bonus', 'Bônus'),
    ('score_without_bonus', 'Pont. s/ Bônus'),
    ('score', 'Pont. c/ Bônus'),
    ('vvr', 'VVR'),
    ('mac', 'MAC'),
    ('indebtedness', 'Endiv.'),
    ('nps', 'NPS'),
    ('margin', 'MC %'),
    ('enps', 'Satisf. Colab.'),
    ('conformity', 'Conform.'),
    ('consultant', 'Consultor'),
]

# --- Writable cells ---
# DEVERIA: unit in A, bonus in D, quarter in V
RESULTS_SHEET = 'DEVERIA'
RESULTS_UNIT_INDEX = 0
RESULTS_QUARTER_INDEX = 21
RESULTS_BONUS_COLUMN = 'D'

# CRITERIOS RANKING: indicator in B, quarters 1..4 in C..F
WEIGHTS_SHEET = 'CRITERIOS RANKING'
WEIGHT_QUARTER_COLUMNS = {'1': 'C', '2': 'D', '3': 'E', '4': 'F'}

# METAS POR CLUSTER: cluster in A, one goal per column
GOALS_SHEET = 'METAS POR CLUSTER'
GOAL_COLUMNS = {
    'VVR': 'B',
    '% ATIGIMENTO MAC': 'C',
    '% ENDIVIDAMENTO': 'D',
    'NPS': 'E',
    '% MC ENTREGA': 'F',
    'E-NPS': 'G',
    'CONFORMIDADE': 'H',
}

# UNI CONS: unit in A, consultant in B, cluster in C
UNITS_SHEET = 'UNI CONS'
UNIT_CONSULTANT_COLUMN = 'B'
UNIT_CLUSTER_COLUMN = 'C'
ACTIVE_CONSULTANTS_HEADER = 'Consultores ativos'
ACTIVE_CLUSTERS_HEADER = 'Cluster ativos'

# --- Vendas spreadsheets ---
# Headers are matched lower-cased; value is the default for a missing column
SALE_COLUMNS = {
    'nm_unidade': None,
    'dt_cadastro_integrante': None,
    'vl_plano': None,
    'venda_posvenda': 'N/A',
    'indicado_por': 'N/A',
    'consultor_comercial': 'N/A',
    'codigo_integrante': 'N/A',
    'nm_integrante': 'N/A',
    'id_fundo': 'N/A',
    'nm_fundo': 'N/A',
    'curso_fundo': '',
    'tp_servico': 'N/A',
    'nm_instituicao': 'N/A',
    'tipo_cliente': 'N/A',
}
SALE_REQUIRED_COLUMNS = ('nm_unidade', 'dt_cadastro_integrante', 'vl_plano')

SALES_GOAL_COLUMNS = {
    'unit': 'nm_unidade',
    'year': 'ano',
    'month': 'mês',
    'meta_vvr_vendas': 'meta vvr_venda',
    'meta_vvr_posvendas': 'meta vvr_pos_venda',
    'meta_adesoes': 'meta adesões',
    'meta_leads': 'meta_leads',
    'meta_reunioes': 'meta_reunioes',
    'meta_contratos': 'meta_contratos',
}

# Positional fallback for goal sheets whose operational headers are blank
SALES_GOAL_FALLBACK_INDEX = {'meta_leads': 8, 'meta_reunioes': 9, 'meta_contratos': 10}

DETAIL_COLUMNS = [
    ('nm_unidade', 'Unidade'),
    ('dt_cadastro_integrante', 'Data'),
    ('nm_integrante', 'Integrante'),
    ('venda_posvenda', 'Tipo'),
    ('vl_plano', 'Valor'),
    ('consultor_comercial', 'Consultor'),
    ('nm_fundo', 'Fundo'),
    ('curso_fundo', 'Curso'),
    ('nm_instituicao', 'Instituição'),
]

# Multi-select filters of the Vendas page: (query string name, sales column, label)
SALE_FILTERS = [
    ('curso', 'curso_fundo', 'Curso'),
    ('fundo', 'nm_fundo', 'Fundo'),
    ('tipo', 'venda_posvenda', 'Tipo de adesão'),
    ('servico', 'tp_servico', 'Tipo de serviço'),
    ('cliente', 'tipo_cliente', 'Tipo de cliente'),
    ('consultor', 'consultor_comercial', 'Consultor comercial'),
]

# Sales whose service type contains this marker are contracts
CONTRACT_SERVICE_MARKER = 'MV'

# Funnel ('base') sheet, read by position: its header row is not stable
FUNNEL_COLUMNS = {
    'titulo': 0,
    'curso': 3,
    'criado_em': 12,
    'consultor': 53,
    'diagnostico_realizado': 59,
    'nm_unidade': 72,
}
