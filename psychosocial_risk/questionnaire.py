"""
Psychosocial Risk Engine - Questionnaire Table.

The fixed NR-01 psychosocial questionnaire: nine themes of ten
questions each. A question belongs to the theme of its
positional block (questions 1-10 -> theme 0, 11-20 -> theme 1, ...).

`is_inverted` marks questions where a high answer means LOWER
risk (e.g. "Existe um canal seguro ... para denunciar assédio?").
"""

from typing import Dict, List, Sequence, Tuple

from .types import Question, QuestionTableError


THEME_COUNT = 9
QUESTIONS_PER_THEME = 10

MIN_ANSWER = 0
MAX_ANSWER = 4

THEME_NAMES: Tuple[str, ...] = (
    "Assédio e Violência",
    "Carga de Trabalho",
    "Reconhecimento e Carreira",
    "Clima Organizacional",
    "Autonomia e Controle",
    "Metas e Pressão",
    "Insegurança no Trabalho",
    "Comunicação e Conflitos",
    "Equilíbrio Vida Pessoal",
)

ANSWER_OPTIONS: Dict[int, str] = {
    0: "Nunca",
    1: "Raramente",
    2: "Às vezes",
    3: "Frequentemente",
    4: "Sempre",
}

QUESTIONS: Tuple[Question, ...] = (
    # Theme 1 (1-10)
    Question(1, "Você já presenciou ou sofreu comentários ofensivos, piadas ou insinuações inadequadas no ambiente de trabalho?", False),
    Question(2, "Você se sente à vontade para relatar situações de assédio moral ou sexual na empresa sem medo de represálias?", True),
    Question(3, "Existe um canal seguro e sigiloso para denunciar assédio na empresa?", True),
    Question(4, "Você já recebeu tratamento desrespeitoso ou humilhante de colegas ou superiores?", False),
    Question(5, "Você sente que há favoritismo ou perseguição por parte da liderança?", False),
    Question(6, "Há casos conhecidos de assédio moral ou sexual que não foram devidamente investigados ou punidos?", False),
    Question(7, "A empresa realiza treinamentos ou campanhas de conscientização sobre assédio?", True),
    Question(8, "O RH e os gestores demonstram comprometimento real com a prevenção do assédio?", True),
    Question(9, "Você já foi forçado(a) a realizar tarefas humilhantes ou degradantes?", False),
    Question(10, "Existe uma cultura de 'brincadeiras' que desrespeitam funcionários? Já foi vítima de alguma delas?", False),

    # Theme 2 (11-20)
    Question(11, "Você sente que sua carga de trabalho diária é superior à sua capacidade de execução dentro do horário normal?", False),
    Question(12, "Você frequentemente precisa fazer horas extras ou levar trabalho para casa?", False),
    Question(13, "As demandas e prazos estabelecidos são realistas e atingíveis?", True),
    Question(14, "Você sente que a empresa respeita seus limites físicos e mentais?", True),
    Question(15, "Você recebe pausas adequadas ao longo do dia?", True),
    Question(16, "Existe um equilíbrio entre tarefas administrativas e operacionais?", True),
    Question(17, "Há redistribuição de tarefas quando há sobrecarga em algum setor ou equipe?", True),
    Question(18, "Você já teve sintomas físicos ou emocionais (como ansiedade, exaustão, insônia) devido ao excesso de trabalho?", False),
    Question(19, "Existe flexibilidade para gerenciar sua própria carga de trabalho?", True),
    Question(20, "A equipe é dimensionada corretamente para a demanda da empresa?", True),

    # Theme 3 (21-30)
    Question(21, "Você sente que seu esforço e desempenho são reconhecidos pela liderança?", True),
    Question(22, "A empresa possui políticas claras de promoção e progressão de carreira?", True),
    Question(23, "As avaliações de desempenho são justas e transparentes?", True),
    Question(24, "Você sente que há igualdade no reconhecimento entre diferentes áreas ou equipes?", True),
    Question(25, "A empresa oferece incentivos financeiros ou não financeiros pelo bom desempenho?", True),
    Question(26, "Você recebe feedback construtivo regularmente?", True),
    Question(27, "Existe uma cultura de valorização dos funcionários?", True),
    Question(28, "Você já se sentiu desmotivado(a) por falta de reconhecimento?", False),
    Question(29, "A empresa celebra conquistas individuais e coletivas?", True),
    Question(30, "O plano de benefícios da empresa é condizente com suas necessidades e expectativas?", True),

    # Theme 4 (31-40)
    Question(31, "O ambiente de trabalho é amigável e colaborativo?", True),
    Question(32, "Existe um sentimento de confiança entre os colegas de trabalho?", True),
    Question(33, "Você se sente confortável para expressar suas opiniões na equipe?", True),
    Question(34, "Os gestores promovem um ambiente saudável e respeitoso?", True),
    Question(35, "Existe transparência na comunicação da empresa?", True),
    Question(36, "Você sente que pode contar com seus colegas em momentos de dificuldade?", True),
    Question(37, "Há um senso de propósito e pertencimento entre os funcionários?", True),
    Question(38, "Conflitos são resolvidos de forma justa e eficiente?", True),
    Question(39, "O ambiente físico do local de trabalho é confortável e seguro?", True),
    Question(40, "A cultura organizacional da empresa está alinhada com seus valores pessoais?", True),

    # Theme 5 (41-50)
    Question(41, "Você tem liberdade para tomar decisões sobre suas tarefas diárias?", True),
    Question(42, "Seu trabalho permite flexibilidade para adaptar sua rotina conforme necessário?", True),
    Question(43, "Você sente que tem voz ativa na empresa?", True),
    Question(44, "A empresa confia em sua capacidade de autogestão?", True),
    Question(45, "Você recebe instruções claras sobre suas responsabilidades?", True),
    Question(46, "O excesso de controle ou burocracia interfere no seu desempenho?", False),
    Question(47, "Suas sugestões são ouvidas e consideradas pela liderança?", True),
    Question(48, "Você tem acesso às ferramentas e recursos necessários para desempenhar bem seu trabalho?", True),
    Question(49, "Você sente que pode propor melhorias sem medo de represálias?", True),
    Question(50, "O excesso de supervisão impacta sua produtividade ou bem-estar?", False),

    # Theme 6 (51-60)
    Question(51, "As metas da empresa são realistas e atingíveis?", True),
    Question(52, "Você sente que há pressão excessiva para alcançar resultados?", False),
    Question(53, "A cobrança por metas impacta sua saúde mental ou emocional?", False),
    Question(54, "Existe apoio da liderança para lidar com desafios relacionados às metas?", True),
    Question(55, "Você sente que pode negociar prazos ou objetivos quando necessário?", True),
    Question(56, "A competitividade entre os funcionários é estimulada de maneira saudável?", True),
    Question(57, "Você já sentiu medo de punição por não atingir metas?", False),
    Question(58, "O sistema de avaliação de metas é transparente?", True),
    Question(59, "Você tem tempo suficiente para cumprir suas demandas com qualidade?", True),
    Question(60, "A pressão por resultados impacta negativamente o ambiente de trabalho?", False),

    # Theme 7 (61-70)
    Question(61, "Você já sentiu que seu emprego está ameaçado sem justificativa clara?", False),
    Question(62, "A empresa faz cortes ou demissões repentinas sem aviso prévio?", False),
    Question(63, "Há comunicação clara sobre a estabilidade da empresa e dos empregos?", True),
    Question(64, "Você já sofreu ameaças veladas ou diretas no ambiente de trabalho?", False),
    Question(65, "Você sente que há transparência nas políticas de desligamento?", True),
    Question(66, "Mudanças organizacionais impactaram seu sentimento de segurança no trabalho?", False),
    Question(67, "Você já presenciou casos de demissões injustas?", False),
    Question(68, "O medo da demissão afeta seu desempenho?", False),
    Question(69, "A empresa oferece suporte psicológico para funcionários inseguros?", True),
    Question(70, "Você já evitou expressar sua opinião por medo de represálias?", False),

    # Theme 8 (71-80)
    Question(71, "Conflitos internos são resolvidos de maneira justa?", True),
    Question(72, "A comunicação entre equipes e departamentos é eficiente?", True),
    Question(73, "Você já evitou colegas ou superiores devido a desentendimentos?", False),
    Question(74, "Existe um canal aberto para feedback entre colaboradores e liderança?", True),
    Question(75, "A falta de comunicação já comprometeu seu trabalho?", False),
    Question(76, "Você sente que há rivalidade desnecessária entre setores?", False),
    Question(77, "Há treinamentos sobre comunicação assertiva e gestão de conflitos?", True),
    Question(78, "Você sente que pode expressar suas dificuldades sem ser julgado?", True),
    Question(79, "A empresa promove um ambiente de diálogo aberto?", True),
    Question(80, "O RH está presente e atuante na mediação de conflitos?", True),

    # Theme 9 (81-90)
    Question(81, "Você sente que a sua jornada de trabalho permite equilíbrio com sua vida pessoal?", True),
    Question(82, "Você sente que tem tempo para sua família e lazer?", True),
    Question(83, "O trabalho impacta negativamente sua saúde mental?", False),
    Question(84, "Você tem flexibilidade para lidar com questões pessoais urgentes?", True),
    Question(85, "A empresa oferece suporte para equilíbrio entre trabalho e vida pessoal?", True),
    Question(86, "Você consegue se desconectar do trabalho fora do expediente?", True),
    Question(87, "Você sente que sua vida pessoal é respeitada pela empresa?", True),
    Question(88, "Há incentivo ao bem-estar e qualidade de vida no trabalho?", True),
    Question(89, "O estresse profissional afeta sua vida familiar?", False),
    Question(90, "O ambiente corporativo valoriza o descanso e recuperação dos funcionários?", True),
)


def questions_for_theme(
    theme_index: int,
    questions: Sequence[Question] = QUESTIONS,
) -> Sequence[Question]:
    """Return the contiguous block of questions that forms a theme."""
    if not 0 <= theme_index < THEME_COUNT:
        raise IndexError(f"Theme index out of range: {theme_index}")
    start = theme_index * QUESTIONS_PER_THEME
    return questions[start:start + QUESTIONS_PER_THEME]


def theme_of(question_id: int, questions: Sequence[Question] = QUESTIONS) -> int:
    """Return the theme index a question belongs to."""
    for position, question in enumerate(questions):
        if question.question_id == question_id:
            return position // QUESTIONS_PER_THEME
    raise KeyError(f"Unknown question id: {question_id}")


def theme_label(theme_index: int) -> str:
    return THEME_NAMES[theme_index]


def validate_question_table(questions: Sequence[Question]) -> List[Question]:
    """
    Check a question table against the fixed theme layout.

    Raises:
        QuestionTableError: Wrong size or duplicate ids
    """
    expected = THEME_COUNT * QUESTIONS_PER_THEME
    if len(questions) != expected:
        raise QuestionTableError(
            f"Question table must hold {expected} questions, got {len(questions)}"
        )

    seen = set()
    for question in questions:
        if question.question_id in seen:
            raise QuestionTableError(f"Duplicate question id: {question.question_id}")
        seen.add(question.question_id)

    return list(questions)
