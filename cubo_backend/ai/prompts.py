"""
Prompts for the text-generation proxy.

Both prompts are in Portuguese, the language the tool is used in. The
suggestions prompt asks for strict JSON so the proxy can validate the
structure before returning it to the client.
"""

SYSTEM_PROMPT = """
Você é um consultor de estratégia e finanças corporativas. Responda sempre em
português, de forma objetiva, e nunca invente números sem indicar a fonte.
"""

BENCHMARK_PROMPT = """Com base na seguinte descrição de projeto, forneça um resumo estruturado de benchmarks de ROI para iniciativas semelhantes. A resposta deve ser em português e bem formatada.

IMPORTANTE: Inclua fontes específicas e confiáveis sempre que possível, como:
- Notícias recentes de empresas que implementaram projetos similares
- Relatórios de consultorias (McKinsey, BCG, Deloitte, etc.)
- Estudos de caso publicados em revistas de negócios
- Dados de associações setoriais
- Relatórios governamentais ou de órgãos reguladores

Para cada informação relevante, inclua:
1. Faixa de ROI comum (ex: 15-25%)
2. Fatores que influenciam esse ROI
3. Exemplos de casos de sucesso similares com fontes específicas
4. Timeframe típico de retorno
5. Riscos e considerações
6. Fontes e links: cite a fonte de cada benchmark mencionado

Descrição do projeto: "{description}"

Formate a resposta de forma clara e organizada, destacando as fontes em negrito."""

SUGGESTIONS_PROMPT = """Com base no histórico e contexto fornecido, sugira 3-5 projetos estratégicos inovadores que se alinhem com os objetivos da empresa. Para cada projeto, forneça:

1. Nome do projeto
2. Categoria (Core, Adjacente, ou Transformacional)
3. Impacto esperado (escala 1-10)
4. Complexidade de implementação (escala 1-10)
5. Descrição breve
6. Potencial de retorno

Contexto da empresa: "{description}"

Responda APENAS com JSON válido, sem texto adicional, com a seguinte estrutura:
{{
  "projects": [
    {{
      "name": "Nome do Projeto",
      "category": "Core|Adjacente|Transformacional",
      "impact": 8,
      "complexity": 6,
      "description": "Descrição do projeto",
      "expectedReturn": "Descrição do retorno esperado"
    }}
  ]
}}"""


def build_prompt(description: str, request_type: str) -> str:
    if request_type == "benchmark":
        return BENCHMARK_PROMPT.format(description=description)
    if request_type == "suggestions":
        return SUGGESTIONS_PROMPT.format(description=description)
    raise ValueError(f"Unknown request type: {request_type}")
