# Initial migration for escalas app
from django.conf import settings
from django.db import migrations, models
import django.core.serializers.json
import django.core.validators
import django.db.models.deletion

import escalas.domain.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Ministry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('color', models.CharField(default='#3b82f6', max_length=7, validators=[django.core.validators.RegexValidator('^#[0-9A-Fa-f]{6}$', 'Cor inválida')])),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Ministério',
                'verbose_name_plural': 'Ministérios',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('name',), name='uniq_active_ministry_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Area',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('min_servants', models.PositiveIntegerField(default=0)),
                ('max_servants', models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('ministry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='areas', to='escalas.ministry')),
            ],
            options={
                'verbose_name': 'Área',
                'verbose_name_plural': 'Áreas',
                'ordering': ['ministry', 'order_index', 'name'],
                'indexes': [
                    models.Index(fields=['ministry', 'is_active'], name='area_ministry_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Servant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=120)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=30, null=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('is_leader', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('area', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='servants', to='escalas.area')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Servo',
                'verbose_name_plural': 'Servos',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['area', 'is_active'], name='servant_area_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RegularEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=100)),
                ('day_of_week', models.IntegerField(db_index=True, help_text='0=Domingo ... 6=Sábado', validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(6)])),
                ('time', models.TimeField()),
                ('week_of_month', models.PositiveSmallIntegerField(blank=True, help_text='N-ésima ocorrência do dia da semana no mês (1-5). Vazio = todas.', null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('ministries', models.ManyToManyField(blank=True, related_name='regular_events', to='escalas.ministry')),
            ],
            options={
                'verbose_name': 'Evento Regular',
                'verbose_name_plural': 'Eventos Regulares',
                'ordering': ['day_of_week', 'time'],
            },
        ),
        migrations.CreateModel(
            name='SchedulePeriod',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.PositiveIntegerField(db_index=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('year', models.PositiveIntegerField(db_index=True, validators=[django.core.validators.MinValueValidator(2024)])),
                ('status', models.CharField(choices=[('draft', 'Rascunho'), ('collecting', 'Coletando Disponibilidade'), ('scheduling', 'Montando Escala'), ('published', 'Publicada'), ('closed', 'Encerrada')], db_index=True, default='draft', max_length=12)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('availability_deadline', models.DateTimeField(blank=True, null=True)),
                ('availability_token', models.CharField(default=escalas.domain.models.new_availability_token, editable=False, max_length=64, unique=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ('ministry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='periods', to='escalas.ministry')),
            ],
            options={
                'verbose_name': 'Período de Escala',
                'verbose_name_plural': 'Períodos de Escala',
                'ordering': ['-year', '-month'],
                'constraints': [
                    models.UniqueConstraint(fields=('ministry', 'month', 'year'), name='uniq_period_ministry_month'),
                ],
                'indexes': [
                    models.Index(fields=['year', 'month'], name='period_year_month_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScheduleEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_date', models.DateField(db_index=True)),
                ('event_time', models.TimeField()),
                ('event_type', models.CharField(choices=[('regular', 'Regular'), ('special', 'Especial'), ('imported', 'Importado')], default='regular', max_length=10)),
                ('title', models.CharField(max_length=120)),
                ('description', models.TextField(blank=True, null=True)),
                ('source', models.CharField(choices=[('manual', 'Manual'), ('regular_calendar', 'Calendário Regular'), ('booking_system', 'Sistema de Agendamentos')], default='manual', max_length=20)),
                ('external_id', models.CharField(blank=True, max_length=64, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('period', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='escalas.scheduleperiod')),
            ],
            options={
                'verbose_name': 'Evento da Escala',
                'verbose_name_plural': 'Eventos da Escala',
                'ordering': ['event_date', 'event_time'],
                'constraints': [
                    models.UniqueConstraint(fields=('period', 'event_date', 'event_time', 'title'), name='uniq_event_period_slot'),
                    models.UniqueConstraint(condition=models.Q(('external_id__isnull', False)), fields=('period', 'external_id'), name='uniq_event_period_external'),
                ],
                'indexes': [
                    models.Index(fields=['period', 'event_date'], name='event_period_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ServantAvailability',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_available', models.BooleanField(default=True)),
                ('notes', models.CharField(blank=True, max_length=200, null=True)),
                ('submitted_at', models.DateTimeField(db_index=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='availabilities', to='escalas.scheduleevent')),
                ('period', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='availabilities', to='escalas.scheduleperiod')),
                ('servant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='availabilities', to='escalas.servant')),
            ],
            options={
                'verbose_name': 'Disponibilidade',
                'verbose_name_plural': 'Disponibilidades',
                'ordering': ['-submitted_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('servant', 'event'), name='uniq_availability_servant_event'),
                ],
                'indexes': [
                    models.Index(fields=['period', 'servant'], name='availability_period_srv_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScheduleAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('confirmed', models.BooleanField(default=False)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('area', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='escalas.area')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='escalas.scheduleevent')),
                ('servant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='escalas.servant')),
            ],
            options={
                'verbose_name': 'Atribuição',
                'verbose_name_plural': 'Atribuições',
                'ordering': ['created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('event', 'area'), name='uniq_assignment_event_area'),
                    models.UniqueConstraint(fields=('event', 'servant'), name='uniq_assignment_event_servant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Environment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Ambiente',
                'verbose_name_plural': 'Ambientes',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('booking_date', models.DateField(db_index=True)),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('occasion', models.CharField(blank=True, max_length=200, null=True)),
                ('responsible_person', models.CharField(blank=True, max_length=120, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pendente'), ('approved', 'Aprovado'), ('rejected', 'Rejeitado'), ('cancelled', 'Cancelado')], db_index=True, default='pending', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('environment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='escalas.environment')),
            ],
            options={
                'verbose_name': 'Reserva',
                'verbose_name_plural': 'Reservas',
                'ordering': ['booking_date', 'start_time'],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(db_index=True, max_length=50)),
                ('table', models.CharField(db_index=True, max_length=50)),
                ('record_id', models.CharField(max_length=50)),
                ('before', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('after', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Auditoria',
                'verbose_name_plural': 'Auditorias',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['table', 'created_at'], name='audit_table_created_idx'),
                    models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
                ],
            },
        ),
    ]
