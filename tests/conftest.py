import pytest

OFFER_ID_HTML = '<div class="offer-view-id">ID: 11569123</div>'

PRICE_HTML = '<div class="offer-view-price-title">35 000 грн/міс</div>'

ADDRESS_HTML = """<div class="offer-view-address">
                Петропавловсклівська, 13/8            </div>
                        <div class="offer-view-section-title2">
                <a href="https://rieltor.ua/flats-rent/">Оренда квартир</a>            </div>
            <div class="offer-view-region">
                <a class="address-link" href="https://rieltor.ua/flats-rent/">Київ</a>,<a class="address-link" href="/flats-rent/%D0%9F%D0%BE%D0%B4%D1%96%D0%BB%D1%8C%D1%81%D1%8C%D0%BA%D0%B8%D0%B9-d78/" data-analytics-event="card-click-region">Подільський р-н</a> """

LABELS_HTML = """<div class="offer-view-labels uilabels">
   <span class="uilabel -premium">
   ПРЕМІУМ                    </span>
   <span class="uilabel -green">
   Комісія 50%                    </span>
   <a class="uilabel -link -icon -subway-blue" href="test" data-analytics-event="card-click-subway_chip">
      </svg>
      <span>Контрактова площа</span>
   </a>
   <a class="uilabel -link" data-analytics-event="card-click-landmark_chip" href="test">
   Рибальський острів                            </a>
   <a class="uilabel -link" data-analytics-event="card-click-newhouse_chip" href="test">
   ЖК Житловий район Rybalsky                        </a>
   <a class="uilabel -link" data-analytics-event="card-click-allow_children_chip" href="https://rieltor.ua/flats-rent/?allow_children=1">
   <img src="/img/filters/allow_children.svg" width="20px">Можна з дітьми                    </a>
   <a class="uilabel -link" data-analytics-event="card-click-allow_pets_chip" href="https://rieltor.ua/flats-rent/?allow_pets=1">
   <img src="/img/filters/allow_pets2.svg" width="20px">Можна з тваринами                    </a>
</div>"""

CHARACTERISTICS_HTML = """<div class="offer-view-details-column">
   <div class="offer-view-details-row"> </svg>
      <span>
      <a href="https://rieltor.ua/flats-rent/1-room/">1 кімната</a>
      </span>
   </div>
   <div class="offer-view-details-row">
      </svg>
      <span>32 / 15 / 5 м²</span>
   </div>
   <div class="offer-view-details-row">
      </svg>
      <span>поверх 3 з 9</span>
   </div>
</div>
<div class="offer-view-details-column">
   <div class="offer-view-details-row">
      <span>Українська цегла</span>
   </div>
   <div class="offer-view-details-row">                            <span>Роздільне</span>
   </div>
   <div class="offer-view-details-row">
      <span>Хороший стан</span>
   </div>
</div>
<div class="offer-view-details-column-aside">
   <div class="offer-view-details-row">
      </svg>
      <span>вчора</span>
   </div>
   <div class="offer-view-details-row">
      </svg>
      <span>1 тиж. тому</span>
   </div>
   <div class="offer-view-details-row">
      </svg>
      <span>
      128                            (сьогодні 1,
      вчора 26)                        </span>
   </div>
</div>
</div>"""

DESCRIPTION_HTML = """<div class="offer-view-section-title">Опис</div>
                    <div class="offer-view-section-text">
                    Сдам в оренду 1-но кімнатну квартиру для орендарів без тварин.<br />Всі необхідні меблі є , новий холодильник і пральна машинка. Квартира чиста і охайна. Є відеоогляд квартири.
                    </div>"""

DETAILS_HTML = """<div class="offer-view-section-title">Деталі</div>
                    <div class="offer-view-section-text">
                    Будинок - Українська цегла, в квартирі 1 кімната. Планування кімнат Роздільне. Загальний стан квартири - Хороший стан. Комісія за послуги 50 %. Торг доречний
                    </div>"""

RIELTOR_HTML = """<div class="offer-view-rieltor-header-info">
              <a href="https://0501112233.rieltor.ua/" class="offer-view-rieltor-name" rel="">
          Пес Патрон        </a>
            <div class="offer-view-rieltor-position">
        Рієлтор      </div>
        <a href="" class="offer-view-rieltor-agency-link">
            Flower-Group          </a>"""

PHOTO_ALTS = [
    "1814416057572659", "1814416057564261", "1814416057573214", "1814416057564281", "1814416057573294",
    "1814416060375345", "1814416060010137", "1814416060239321", "1814416059797714", "1814416060350043",
]

PHOTOS_HTML = "\n                                            ".join(
    f'<img class="offer-photo-gallery__image" '
    f'src="https://img.lunstatic.net/rieltor-offer-1600x1200/offers/{i}/x.jpeg" alt="{alt}" loading="lazy">'
    for i, alt in enumerate(PHOTO_ALTS)
)

NOISE = '<div class="banner"><script>var x = {"a": 1};</script><p>Реклама</p></div>'


def make_page(*parts: str) -> str:
    body = f"\n{NOISE}\n".join(parts)
    return f"<!DOCTYPE html><html><head><title>rieltor.ua</title></head><body>\n{body}\n</body></html>"


@pytest.fixture
def listing_html() -> str:
    return make_page(
        PHOTOS_HTML, OFFER_ID_HTML, PRICE_HTML, ADDRESS_HTML, LABELS_HTML, CHARACTERISTICS_HTML,
        DESCRIPTION_HTML, DETAILS_HTML, RIELTOR_HTML,
    )


@pytest.fixture
def list_page_html() -> str:
    cards = []
    for lid in ("11569123", "11569124", "11569123", "11570001"):
        cards.append(
            f'<div class="catalog-card"><a href="https://rieltor.ua/flats-rent/view/{lid}/" '
            f'class="catalog-card-media">photo</a><a href="https://rieltor.ua/flats-rent/view/{lid}/">'
            f"details</a></div>"
        )
    cards.append('<a href="https://rieltor.ua/flats-rent/?page=2">next</a>')
    return make_page(*cards)
