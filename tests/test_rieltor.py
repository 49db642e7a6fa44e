import pytest

from rieltor_listings.common import ConversionError, DomainValidationError, StructureMismatchError
from rieltor_listings.models import Currency, SubwayLine
from rieltor_listings.rieltor import parse

from conftest import (
    ADDRESS_HTML, CHARACTERISTICS_HTML, LABELS_HTML, PRICE_HTML, RIELTOR_HTML, make_page,
)


def test_parse_full_listing(listing_html):
    apartment = parse(listing_html)

    assert apartment.id == "11569123"
    assert apartment.link == "https://rieltor.ua/flats-rent/view/11569123/"

    assert apartment.price.price_number == 35000
    assert apartment.price.currency is Currency.UAH

    assert apartment.address.street == "Петропавловсклівська"
    assert apartment.address.house_number == "13/8"
    assert apartment.address.city == "Київ"
    assert apartment.address.district == "Подільський р-н"

    ch = apartment.characteristics
    assert ch.room_count == 1
    assert (ch.area.total, ch.area.living, ch.area.kitchen) == (32.0, 15.0, 5.0)
    assert (ch.floor, ch.max_floor) == (3, 9)
    assert ch.house_type == "Українська цегла"
    assert ch.room_planning == "Роздільне"
    assert ch.state == "Хороший стан"
    assert ch.statistics.renewed == "вчора"
    assert ch.statistics.published == "1 тиж. тому"
    assert (ch.statistics.views.total, ch.statistics.views.today, ch.statistics.views.yesterday) == (128, 1, 26)

    permits = apartment.permits
    assert permits.premium_advert is True
    assert permits.short_period is False
    assert permits.allow_children is True
    assert permits.allow_pets is True
    assert permits.bargain is True
    assert permits.commission.commission_rate == 50
    assert permits.commission.commission_price is None

    infra = apartment.infrastructure
    assert [(s.name, s.line) for s in infra.subway_station] == [("Контрактова площа", SubwayLine.BLUE)]
    assert infra.landmarks == ["Рибальський острів"]
    assert infra.residential_complex == "ЖК Житловий район Rybalsky"

    assert apartment.description.advert_description.startswith("Сдам в оренду")
    assert "<br" not in apartment.description.advert_description
    assert apartment.description.details_description.endswith("Торг доречний")

    assert apartment.rieltor.rieltor_phone_number == "0501112233"
    assert apartment.rieltor.rieltor_name == "Пес Патрон"
    assert apartment.rieltor.rieltor_position == "Рієлтор"
    assert apartment.rieltor.rieltor_agency == "Flower-Group"

    assert len(apartment.photo) == 10
    assert apartment.photo[0].endswith("/offers/0/x.jpeg")
    assert apartment.photo[9].endswith("/offers/9/x.jpeg")


def test_parse_is_idempotent(listing_html):
    assert parse(listing_html) == parse(listing_html)


def test_missing_sections_keep_defaults():
    apartment = parse(make_page(PRICE_HTML))
    assert apartment.price.price_number == 35000
    assert apartment.id == ""
    assert apartment.link == ""
    assert apartment.characteristics.room_count == 1
    assert apartment.characteristics.floor == 1
    assert apartment.characteristics.house_type is None
    assert apartment.permits.commission.commission_rate == 0
    assert apartment.infrastructure.subway_station == []
    assert apartment.rieltor.rieltor_agency is None
    assert apartment.photo == []


@pytest.mark.parametrize(
    "markup,amount,currency",
    [
        ("35 000 грн/міс", 35000, Currency.UAH),
        ("1 200 $/міс", 1200, Currency.USD),
        ("900 €/міс", 900, Currency.EUR),
        ("12 000", 12000, Currency.UAH),
        ("12 000 грн", 12000, Currency.UAH),
        ("35\u2009000 грн/міс", 35000, Currency.UAH),
        ("35\u202f000 грн/міс", 35000, Currency.UAH),
        ("35\u00a0000 $", 35000, Currency.USD),
    ],
)
def test_price_currency(markup, amount, currency):
    apartment = parse(f'<div class="offer-view-price-title">{markup}</div>')
    assert apartment.price.price_number == amount
    assert apartment.price.currency is currency


def test_rieltor_without_agency():
    html = RIELTOR_HTML.split('<a href="" class="offer-view-rieltor-agency-link">')[0]
    apartment = parse(make_page(html))
    assert apartment.rieltor.rieltor_name == "Пес Патрон"
    assert apartment.rieltor.rieltor_agency is None


@pytest.mark.parametrize("line", ["yellow", "3", "light-green", "blue2"])
def test_unknown_subway_line_fails(line):
    labels = LABELS_HTML.replace("-subway-blue", f"-subway-{line}")
    with pytest.raises(DomainValidationError) as exc:
        parse(make_page(PRICE_HTML, labels))
    assert exc.value.value == line


def test_subway_line_ignores_case():
    labels = LABELS_HTML.replace("-subway-blue", "-subway-Red")
    stations = parse(make_page(labels)).infrastructure.subway_station
    assert [s.line for s in stations] == [SubwayLine.RED]


@pytest.mark.parametrize(
    "old,new,bad",
    [
        ("32 / 15 / 5 м²", "32 / 15.5.1 / 5 м²", "15.5.1"),
        ("1 кімната", "5+ кімнат", "5+"),
        ("128", "99999999999", "99999999999"),
    ],
)
def test_bad_numbers_fail(old, new, bad):
    html = make_page(CHARACTERISTICS_HTML.replace(old, new))
    with pytest.raises(ConversionError) as exc:
        parse(html)
    assert exc.value.text == bad


def test_commission_fee():
    labels = LABELS_HTML.replace("Комісія 50%", "Комісія 3 000 грн")
    apartment = parse(make_page(labels))
    commission = apartment.permits.commission
    assert commission.commission_rate == 0
    assert commission.commission_price.price_number == 3000
    assert commission.commission_price.currency is Currency.UAH


def test_subway_stations_and_landmarks_keep_order():
    html = """<div class="offer-view-labels uilabels">
       <a class="uilabel -link -icon -subway-red" href="x"><span>Хрещатик</span></a>
       <a class="uilabel -link" data-analytics-event="card-click-landmark_chip" href="x">Майдан</a>
       <a class="uilabel -link -icon -subway-green" href="x"><span>Золоті ворота</span></a>
       <a class="uilabel -link" data-analytics-event="card-click-landmark_chip" href="x">Опера</a>
    </div>"""
    apartment = parse(make_page(html))
    stations = apartment.infrastructure.subway_station
    assert [(s.name, s.line) for s in stations] == [
        ("Хрещатик", SubwayLine.RED), ("Золоті ворота", SubwayLine.GREEN),
    ]
    assert apartment.infrastructure.landmarks == ["Майдан", "Опера"]


def test_address_only_page():
    apartment = parse(make_page(ADDRESS_HTML))
    assert apartment.address.house_number == "13/8"


def test_address_without_house_number():
    html = ADDRESS_HTML.replace("Петропавловсклівська, 13/8", "Петропавловсклівська")
    address = parse(make_page(html)).address
    assert address.street == "Петропавловсклівська"
    assert address.house_number == ""
    assert address.city
    assert address.district


def test_unrelated_input_fails():
    with pytest.raises(StructureMismatchError):
        parse("<html><body>404 Not Found</body></html>")
